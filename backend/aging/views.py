# aging/views.py
"""
AR/AP aging API.

Analysis endpoints read the company's items and hand them to the pure
functions in aging/analysis.py. ``as_of`` (YYYY-MM-DD) may be passed to
evaluate at a date other than today.
"""

from django.http import Http404
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from aging import analysis
from aging.commands import (
    NOT_FOUND,
    create_item,
    delete_item,
    mark_paid,
    recalculate_aging,
    update_item,
)
from aging.models import ArApItem
from aging.serializers import (
    ArApItemCreateSerializer,
    ArApItemFilterSerializer,
    ArApItemSerializer,
    ArApItemUpdateSerializer,
)


def _failure(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _as_of(request):
    raw = request.query_params.get("as_of")
    if not raw:
        return timezone.localdate()
    parsed = parse_date(raw)
    if parsed is None:
        raise ValidationError({"as_of": "Geçersiz tarih"})
    return parsed


def _item_type(value):
    if value not in ArApItem.ItemType.values:
        raise Http404("Geçersiz kayıt türü")
    return value


def _items(company, item_type=None):
    qs = ArApItem.objects.filter(company=company)
    if item_type:
        qs = qs.filter(item_type=item_type)
    return list(qs)


class ArApItemListCreateView(APIView):
    """
    GET /api/aging/items/?item_type=&status=&aging_bucket=&customer_supplier=
    POST /api/aging/items/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "aging.view")

        filters = ArApItemFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        qs = ArApItem.objects.filter(company=actor.company)
        if params.get("item_type"):
            qs = qs.filter(item_type=params["item_type"])
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("aging_bucket"):
            qs = qs.filter(aging_bucket=params["aging_bucket"])
        if params.get("customer_supplier"):
            qs = qs.filter(customer_supplier__icontains=params["customer_supplier"])

        return Response(ArApItemSerializer(qs.order_by("-aging_days", "id"), many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = ArApItemCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_item(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(ArApItemSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ArApItemDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        item = ArApItem.objects.filter(company=actor.company, pk=pk).first()
        if not item:
            raise Http404(NOT_FOUND)
        return item

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "aging.view")
        return Response(ArApItemSerializer(self.get_object(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        input_serializer = ArApItemUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)

        result = update_item(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(ArApItemSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_item(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ArApItemMarkPaidView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        result = mark_paid(actor, pk)
        if not result.success:
            if result.error == NOT_FOUND:
                raise Http404(result.error)
            return _failure(result)
        return Response(ArApItemSerializer(result.data).data)


class AgingSummaryView(APIView):
    """GET /api/aging/summary/<item_type>/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, item_type):
        actor = resolve_actor(request)
        require(actor, "aging.view")

        item_type = _item_type(item_type)
        summary = analysis.aging_summary(_items(actor.company, item_type), _as_of(request))
        return Response({"item_type": item_type, **summary})


class AgingByCustomerView(APIView):
    """GET /api/aging/customers/<item_type>/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, item_type):
        actor = resolve_actor(request)
        require(actor, "aging.view")

        rows = analysis.aging_by_customer(_items(actor.company, _item_type(item_type)), _as_of(request))
        return Response(rows)


class AgingStatisticsView(APIView):
    """GET /api/aging/statistics/?item_type="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "aging.view")

        item_type = request.query_params.get("item_type")
        if item_type:
            item_type = _item_type(item_type)
        return Response(analysis.aging_statistics(_items(actor.company, item_type), _as_of(request)))


class DaysOutstandingView(APIView):
    """GET /api/aging/dso-dpo/?period_days=90"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "aging.view")

        try:
            period_days = max(1, min(int(request.query_params.get("period_days", 90)), 3650))
        except ValueError:
            return Response({"detail": "Geçersiz gün sayısı"}, status=status.HTTP_400_BAD_REQUEST)

        as_of = _as_of(request)
        items = _items(actor.company)
        return Response({
            "dso": analysis.days_outstanding(items, ArApItem.ItemType.RECEIVABLE, as_of, period_days),
            "dpo": analysis.days_outstanding(items, ArApItem.ItemType.PAYABLE, as_of, period_days),
            "period_days": period_days,
        })


class CollectionPrioritiesView(APIView):
    """GET /api/aging/priorities/<item_type>/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, item_type):
        actor = resolve_actor(request)
        require(actor, "aging.view")

        rows = analysis.collection_priorities(_items(actor.company, _item_type(item_type)), _as_of(request))
        return Response(rows)


class RecalculateAgingView(APIView):
    """POST /api/aging/recalculate/"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        return Response(recalculate_aging(actor=actor, as_of=_as_of(request)))
