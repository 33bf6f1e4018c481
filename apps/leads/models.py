from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.urls import reverse
from django.utils import timezone
from taggit.managers import TaggableManager


class Lead(models.Model):

    # Temperature
    STATUS_CHOICES = [
        ('prospect', 'Prospect'),
        ('qualified', 'Qualified'),
        ('interested', 'Interested'),
        ('negotiating', 'Negotiating'),
    ]

    # Funnel order matters: dashboards walk this list
    FUNNEL_STATUSES = [
        ('new_lead', 'New lead'),
        ('contact_made', 'Contact made'),
        ('visit_scheduled', 'Visit scheduled'),
        ('proposal_sent', 'Proposal sent'),
        ('in_negotiation', 'In negotiation'),
        ('contract_signed', 'Contract signed'),
        ('sale_completed', 'Sale completed'),
    ]

    # Statuses used by the qualified-leads pipeline
    PIPELINE_STATUSES = [
        ('interest_shown', 'Interest shown'),
        ('financially_qualified', 'Financially qualified'),
        ('visit_done', 'Visit done'),
        ('post_visit_follow_up', 'Post-visit follow-up'),
        ('negotiation_in_progress', 'Negotiation in progress'),
        ('documents_pending', 'Documents pending'),
    ]

    NEGOTIATION_STATUS_CHOICES = FUNNEL_STATUSES + PIPELINE_STATUSES

    SOURCE_CHOICES = [
        ('manual', 'Manual entry'),
        ('website', 'Website'),
        ('referral', 'Referral'),
        ('social_media', 'Social media'),
        ('phone', 'Phone'),
        ('walk_in', 'Walk-in'),
        ('other', 'Other'),
    ]

    DISQUALIFICATION_REASONS = [
        ('no_interest', 'No interest'),
        ('incompatible_profile', 'Incompatible profile'),
        ('lost_contact', 'Lost contact'),
        ('duplicate', 'Duplicate lead'),
        ('insufficient_budget', 'Insufficient budget'),
        ('not_decision_maker', 'Not the decision maker'),
        ('other', 'Other'),
    ]

    DEFAULT_NAME = 'Unnamed lead'

    # Basic Information
    name = models.CharField(max_length=200, help_text="Lead's full name")
    email = models.EmailField(blank=True, null=True, db_index=True, help_text='Email address (optional)')
    phone = models.CharField(max_length=20, blank=True, db_index=True, help_text='Phone number')

    # Classification
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='prospect', help_text='Lead temperature')
    negotiation_status = models.CharField(max_length=30, choices=NEGOTIATION_STATUS_CHOICES, default='new_lead', db_index=True, help_text='Current stage in the sales pipeline')
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='manual', help_text='Where did this lead come from?')

    # Qualification
    qualified = models.BooleanField(default=False, db_index=True, help_text='Vetted by an agent as viable')
    disqualified = models.BooleanField(default=False, db_index=True)
    disqualification_reason = models.CharField(max_length=30, choices=DISQUALIFICATION_REASONS, blank=True)
    disqualification_notes = models.TextField(blank=True)

    # Qualifying profile
    monthly_income = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    profession = models.CharField(max_length=100, blank=True)
    desired_property_type = models.CharField(max_length=100, blank=True)
    interest_location = models.CharField(max_length=200, blank=True)

    # Ownership
    agent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='leads', help_text='Agent responsible for this lead')

    notes = models.TextField(blank=True, help_text='Free-text notes; calls and emails are appended here')
    tags = TaggableManager(blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        verbose_name = 'Lead'
        verbose_name_plural = 'Leads'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['agent', 'negotiation_status'], name='clients_agent_status_idx'),
            models.Index(fields=['qualified', 'disqualified'], name='clients_qualification_idx'),
        ]

    def __str__(self):
        return f"{self.name} - {self.get_negotiation_status_display()}"

    def get_absolute_url(self):
        return reverse('leads:lead_detail', kwargs={'pk': self.pk})

    def get_initials(self):
        """'Maria Silva' -> 'MS'"""
        parts = self.name.split()
        if len(parts) >= 2:
            return f"{parts[0][0]}{parts[1][0]}".upper()
        elif len(parts) == 1:
            return parts[0][0].upper()
        return "?"

    @classmethod
    def find_duplicate(cls, email=None, phone=None, exclude_pk=None):
        """Existing lead sharing the email OR the phone, if any"""
        query = models.Q()
        if email:
            query |= models.Q(email__iexact=email)
        if phone:
            query |= models.Q(phone=phone)
        if not query:
            return None

        queryset = cls.objects.filter(query)
        if exclude_pk:
            queryset = queryset.exclude(pk=exclude_pk)
        return queryset.first()

    # QUALIFICATION
    def qualify(self, user=None):
        self.qualified = True
        self.disqualified = False
        self.save(update_fields=['qualified', 'disqualified', 'updated_at'])

        Activity.log(self, user, 'qualification', f'Lead "{self.name}" qualified')

    def disqualify(self, reason, notes='', user=None):
        """
        Mark the lead as disqualified.

        Raises:
            ValidationError: when no reason is given (nothing is saved)
        """
        if not reason or not str(reason).strip():
            raise ValidationError('A disqualification reason is required.')

        self.disqualified = True
        self.qualified = False
        self.disqualification_reason = reason
        self.disqualification_notes = notes or ''
        self.save(update_fields=[
            'disqualified', 'qualified', 'disqualification_reason',
            'disqualification_notes', 'updated_at',
        ])

        reason_display = dict(self.DISQUALIFICATION_REASONS).get(reason, reason)
        Activity.log(self, user, 'disqualification', f'Lead "{self.name}" disqualified: {reason_display}')

    def requalify(self, user=None):
        self.disqualified = False
        self.disqualification_reason = ''
        self.disqualification_notes = ''
        self.save(update_fields=[
            'disqualified', 'disqualification_reason',
            'disqualification_notes', 'updated_at',
        ])

        Activity.log(self, user, 'requalification', f'Lead "{self.name}" requalified')

    # PIPELINE
    def change_negotiation_status(self, new_status, user=None):
        if new_status not in dict(self.NEGOTIATION_STATUS_CHOICES):
            raise ValidationError(f'Invalid negotiation status: {new_status}')

        old_display = self.get_negotiation_status_display()
        self.negotiation_status = new_status
        self.save(update_fields=['negotiation_status', 'updated_at'])

        Activity.log(
            self, user, 'status_change',
            f'Status changed from "{old_display}" to "{self.get_negotiation_status_display()}"'
        )

    def register_contact(self, kind, summary, user=None):
        """
        Record a call or email: append it to the notes, log it and
        move a brand-new lead to "contact made".
        """
        label = 'Call' if kind == 'call' else 'Email'
        stamp = timezone.localtime().strftime('%Y-%m-%d %H:%M')
        entry = f'[{stamp}] {label}: {summary}'
        self.notes = f'{self.notes}\n{entry}' if self.notes else entry

        update_fields = ['notes', 'updated_at']
        if self.negotiation_status == 'new_lead':
            self.negotiation_status = 'contact_made'
            update_fields.append('negotiation_status')
        self.save(update_fields=update_fields)

        Activity.log(self, user, kind, f'{label} with {self.name}: {summary}')

    def is_active_lead(self):
        return self.negotiation_status != 'sale_completed' and not self.disqualified

    def time_since_created(self):
        """Returns time elapsed since lead was created"""
        delta = timezone.now() - self.created_at

        if delta.days > 30:
            months = delta.days // 30
            return f"{months} month{'s' if months > 1 else ''} ago"
        elif delta.days > 0:
            return f"{delta.days} day{'s' if delta.days > 1 else ''} ago"
        elif delta.seconds >= 3600:
            hours = delta.seconds // 3600
            return f"{hours} hour{'s' if hours > 1 else ''} ago"
        elif delta.seconds >= 60:
            minutes = delta.seconds // 60
            return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
        return "Just now"


class Activity(models.Model):

    ACTIVITY_TYPE_CHOICES = [
        ('new_lead', 'New lead'),
        ('qualification', 'Qualification'),
        ('disqualification', 'Disqualification'),
        ('requalification', 'Requalification'),
        ('status_change', 'Status change'),
        ('call', 'Call'),
        ('email', 'Email'),
        ('appointment', 'Appointment'),
        ('document', 'Document'),
        ('sale_finalized', 'Sale finalized'),
        ('sale_canceled', 'Sale canceled'),
        ('lead_updated', 'Lead updated'),
        ('lead_deleted', 'Lead deleted'),
    ]

    lead = models.ForeignKey(Lead, on_delete=models.SET_NULL, null=True, blank=True, related_name='activities', help_text='Which lead this activity is for')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='activities', help_text='Who performed this action')
    activity_type = models.CharField(max_length=30, choices=ACTIVITY_TYPE_CHOICES)
    description = models.TextField(help_text='Human-readable description of what happened')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'activities'
        verbose_name = 'Activity'
        verbose_name_plural = 'Activities'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['lead', '-created_at'], name='activities_lead_idx'),
            models.Index(fields=['user', '-created_at'], name='activities_user_idx'),
        ]

    def __str__(self):
        user_name = self.user.get_full_name() if self.user else 'System'
        return f"{user_name}: {self.description}"

    @classmethod
    def log(cls, lead, user, activity_type, description):
        """Append an entry; anonymous/system actions are stored without a user"""
        if user is not None and not getattr(user, 'is_authenticated', False):
            user = None
        return cls.objects.create(
            lead=lead,
            user=user,
            activity_type=activity_type,
            description=description,
        )
