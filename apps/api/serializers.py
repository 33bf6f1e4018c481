from rest_framework import serializers

from apps.appointments.models import Appointment
from apps.core.utils import scope_to_user
from apps.documents.models import ClientDocument
from apps.leads.forms import normalize_phone
from apps.leads.models import Lead, Activity
from apps.products.models import Product
from apps.sales.models import SaleFinalized


class ScopedLeadField(serializers.PrimaryKeyRelatedField):
    """Lead picker limited to the leads the requesting user may see"""

    def get_queryset(self):
        request = self.context.get('request')
        return scope_to_user(Lead.objects.all(), request.user if request else None)


class LeadSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    agent = serializers.PrimaryKeyRelatedField(read_only=True)
    agent_name = serializers.SerializerMethodField()
    tags = serializers.SerializerMethodField()

    class Meta:
        model = Lead
        fields = [
            'id', 'name', 'email', 'phone',
            'status', 'negotiation_status', 'source',
            'qualified', 'disqualified', 'disqualification_reason', 'disqualification_notes',
            'monthly_income', 'profession', 'desired_property_type', 'interest_location',
            'notes', 'tags', 'agent', 'agent_name',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['qualified', 'disqualified', 'disqualification_reason', 'disqualification_notes']

    def get_agent_name(self, obj):
        return obj.agent.get_full_name() if obj.agent else None

    def get_tags(self, obj):
        return sorted(tag.name for tag in obj.tags.all())

    def validate_name(self, value):
        return value.strip() or Lead.DEFAULT_NAME

    def validate_email(self, value):
        return value.strip().lower() if value else None

    def validate_phone(self, value):
        return normalize_phone(value)

    def validate(self, attrs):
        if self.instance is None and not attrs.get('name'):
            attrs['name'] = Lead.DEFAULT_NAME

        email = attrs['email'] if 'email' in attrs else getattr(self.instance, 'email', None)
        phone = attrs['phone'] if 'phone' in attrs else getattr(self.instance, 'phone', '')
        duplicate = Lead.find_duplicate(
            email=email,
            phone=phone,
            exclude_pk=self.instance.pk if self.instance else None,
        )
        if duplicate:
            raise serializers.ValidationError(f'Lead already registered: {duplicate.name}')

        return attrs

    def update(self, instance, validated_data):
        # Status changes go through change_negotiation_status so they are logged
        new_status = validated_data.pop('negotiation_status', None)
        instance = super().update(instance, validated_data)
        if new_status and new_status != instance.negotiation_status:
            request = self.context.get('request')
            instance.change_negotiation_status(new_status, user=request.user if request else None)
        return instance


class AppointmentSerializer(serializers.ModelSerializer):
    lead = ScopedLeadField()
    agent = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'id', 'lead', 'agent', 'title', 'date_time', 'location', 'notes',
            'status', 'reminder_sent', 'created_at', 'updated_at',
        ]
        read_only_fields = ['reminder_sent']


class ClientDocumentSerializer(serializers.ModelSerializer):
    lead = ScopedLeadField()
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = ClientDocument
        fields = [
            'id', 'lead', 'name', 'document_type', 'status', 'due_date',
            'received_at', 'approved_at', 'file', 'notes', 'is_overdue',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['received_at', 'approved_at']

    def update(self, instance, validated_data):
        # Status changes go through set_status so the timestamps follow
        status = validated_data.pop('status', None)
        instance = super().update(instance, validated_data)
        if status and status != instance.status:
            instance.set_status(status)
        return instance


class SaleFinalizedSerializer(serializers.ModelSerializer):
    lead = ScopedLeadField()
    agent = serializers.PrimaryKeyRelatedField(read_only=True)
    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(status='available'), required=False, allow_null=True
    )
    product_name = serializers.CharField(max_length=200, required=False)
    client_name = serializers.CharField(read_only=True)

    class Meta:
        model = SaleFinalized
        fields = [
            'id', 'lead', 'client_name', 'agent', 'product', 'product_name',
            'sale_value', 'completion_date', 'contract', 'notes', 'created_at',
        ]
        read_only_fields = ['contract']

    def validate(self, attrs):
        if attrs.get('product_name'):
            return attrs

        product = attrs.get('product')
        if product is not None:
            attrs['product_name'] = product.title
        elif self.instance is None:
            raise serializers.ValidationError({'product_name': 'Provide a product or a product name.'})
        return attrs


class ActivitySerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Activity
        fields = ['id', 'lead', 'user', 'user_name', 'activity_type', 'description', 'created_at']
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.get_full_name() if obj.user else None


class ProductSerializer(serializers.ModelSerializer):
    agent = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'title', 'description', 'product_type', 'price', 'location',
            'bedrooms', 'bathrooms', 'area', 'image', 'status', 'agent',
            'created_at', 'updated_at',
        ]
