"""
Customer views.
"""
from rest_framework import filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from core_backend.base import ReadOnlyBaseViewSet
from .models import Customer
from .serializers import CustomerSearchSerializer, CustomerSerializer
from .services import CustomerService


class CustomerViewSet(ReadOnlyBaseViewSet):
    """
    list / retrieve: Customers of the tenant by name (?search=).
    create / update: Any operator can register a customer at the register.
    search: Quick lookup for the sale screen, at most five matches.
    """
    serializer_class = CustomerSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'phone_number', 'email']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Customer.all_objects.filter(tenant=self.request.tenant)

    def _save(self, request, instance=None, partial=False):
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        customer = CustomerService.save_customer(request.tenant, dict(serializer.validated_data), instance=instance)
        return Response(
            CustomerSerializer(customer).data,
            status=status.HTTP_201_CREATED if instance is None else status.HTTP_200_OK
        )

    def create(self, request, *args, **kwargs):
        return self._save(request)

    def update(self, request, *args, **kwargs):
        return self._save(request, self.get_object(), partial=kwargs.pop('partial', False))

    def partial_update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return self.update(request, *args, **kwargs)

    @action(detail=False, methods=['get'])
    def search(self, request):
        params = CustomerSearchSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        customers = CustomerService.search(request.tenant, params.validated_data['q'])
        return Response(CustomerSerializer(customers, many=True).data)
