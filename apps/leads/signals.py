from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import Lead, Activity


@receiver(post_save, sender=Lead)
def create_lead_activity(sender, instance, created, **kwargs):
    # Every new lead (form, API or admin) gets its "new_lead" entry
    if created:
        Activity.log(
            instance,
            instance.agent,
            'new_lead',
            f'New lead registered: {instance.name}'
        )
