"""
REST surface over the CRM tables.

Every viewset is role scoped like the HTML views: agents only ever see
(and can only touch) their own rows, managers see everything.
Simple equality filters come from the query string, e.g.
    /api/clients/?negotiation_status=proposal_sent&qualified=true
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError

from apps.appointments.models import Appointment
from apps.core.utils import scope_to_user
from apps.documents.models import ClientDocument
from apps.leads.models import Lead, Activity
from apps.products.models import Product
from apps.sales.models import SaleFinalized
from apps.sales.services import finalize_sale, cancel_sale, ContractUploadError
from . import serializers

logger = logging.getLogger(__name__)

BOOLEAN_VALUES = {'true': True, '1': True, 'false': False, '0': False}


def filter_or_400(queryset, **filters):
    """Apply query-string filters; values the column cannot parse answer 400"""
    try:
        return queryset.filter(**filters)
    except (ValueError, DjangoValidationError):
        raise ValidationError({'detail': 'Invalid filter value.'})


class ScopedModelViewSet(viewsets.ModelViewSet):
    """
    Attributes:
        scope_field: lookup pointing at the owning agent
        filter_fields: query parameters applied as exact filters
        boolean_filter_fields: query parameters parsed as true/false
    """

    queryset = None
    scope_field = 'agent'
    filter_fields = ()
    boolean_filter_fields = ()

    def get_queryset(self):
        queryset = scope_to_user(self.queryset.all(), self.request.user, field=self.scope_field)

        params = self.request.query_params
        filters = {}

        for field in self.filter_fields:
            value = params.get(field)
            if value not in (None, ''):
                filters[field] = value

        for field in self.boolean_filter_fields:
            value = params.get(field, '').lower()
            if value in BOOLEAN_VALUES:
                filters[field] = BOOLEAN_VALUES[value]

        return filter_or_400(queryset, **filters)


class AgentOwnedViewSet(ScopedModelViewSet):
    """Rows created through the API belong to the requesting user"""

    def perform_create(self, serializer):
        serializer.save(agent=self.request.user)


class LeadViewSet(AgentOwnedViewSet):
    queryset = Lead.objects.select_related('agent').prefetch_related('tags')
    serializer_class = serializers.LeadSerializer
    filter_fields = ('negotiation_status', 'status', 'source')
    boolean_filter_fields = ('qualified', 'disqualified')


class AppointmentViewSet(AgentOwnedViewSet):
    queryset = Appointment.objects.select_related('lead', 'agent')
    serializer_class = serializers.AppointmentSerializer
    filter_fields = ('status', 'lead')


class ClientDocumentViewSet(ScopedModelViewSet):
    queryset = ClientDocument.objects.select_related('lead')
    serializer_class = serializers.ClientDocumentSerializer
    scope_field = 'lead__agent'
    filter_fields = ('status', 'lead', 'document_type')


class SaleFinalizedViewSet(ScopedModelViewSet):
    """
    Create goes through finalize_sale (lead -> sale_completed, activity),
    delete goes through cancel_sale (lead -> in_negotiation, contract removed).
    """

    queryset = SaleFinalized.objects.select_related('lead', 'agent', 'product')
    serializer_class = serializers.SaleFinalizedSerializer
    filter_fields = ('lead', 'product')

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        if params.get('date_from'):
            queryset = filter_or_400(queryset, completion_date__gte=params['date_from'])
        if params.get('date_to'):
            queryset = filter_or_400(queryset, completion_date__lte=params['date_to'])
        return queryset

    def perform_create(self, serializer):
        data = serializer.validated_data
        try:
            serializer.instance = finalize_sale(
                data['lead'],
                self.request.user,
                product_name=data['product_name'],
                sale_value=data['sale_value'],
                completion_date=data['completion_date'],
                product=data.get('product'),
                notes=data.get('notes', ''),
            )
        except ContractUploadError as e:
            raise ValidationError({'contract': str(e)})

    def perform_destroy(self, instance):
        cancel_sale(instance, self.request.user)


class ActivityViewSet(viewsets.ReadOnlyModelViewSet):
    """Append-only log: no create, update or delete over the API"""

    queryset = Activity.objects.select_related('user')
    serializer_class = serializers.ActivitySerializer

    def get_queryset(self):
        queryset = self.queryset.all()
        if not self.request.user.is_manager():
            queryset = queryset.filter(user=self.request.user)

        params = self.request.query_params
        if params.get('lead'):
            queryset = filter_or_400(queryset, lead=params['lead'])
        if params.get('activity_type'):
            queryset = queryset.filter(activity_type=params['activity_type'])
        return queryset


class ProductViewSet(AgentOwnedViewSet):
    queryset = Product.objects.select_related('agent')
    serializer_class = serializers.ProductSerializer
    filter_fields = ('product_type', 'status')
