"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import functools
import logging

from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from scheduling.cache_keys import GAPS_KEY, PRICE_LISTS_KEY, VOUCHERS_KEY
from scheduling.conf import get_setting
from scheduling.domain.errors import DomainError, ErrorCode
from scheduling.handlers.serializers import (
    BlockedDaysSerializer,
    DuplicateSerializer,
    EndDateSerializer,
    GapReportSerializer,
    PriceListCreateSerializer,
    PriceListSerializer,
    PromotionLineInputSerializer,
    ReevaluateSerializer,
    SplitSerializer,
    StatusChangeSerializer,
    VoucherCreateSerializer,
    VoucherSerializer,
    VoucherStatusSerializer,
)
from scheduling.services.price_list_service import PriceListService
from scheduling.services.voucher_service import VoucherService
from scheduling.stores.django_store import DjangoPriceListStore, DjangoVoucherStore

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.PRICE_LIST_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VOUCHER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PROMOTION_LINE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PLACEMENT_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.EXCLUSION_GROUP_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_CODE: status.HTTP_409_CONFLICT,
    ErrorCode.WRITE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(error: DomainError) -> Response:
    return Response(
        {"code": error.code.value, "message": error.message},
        status=STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def maps_domain_errors(handler):
    @functools.wraps(handler)
    def wrapper(self, request, *args, **kwargs):
        try:
            return handler(self, request, *args, **kwargs)
        except DomainError as error:
            logger.info("%s %s rejected: %s", request.method, request.path, error)
            return error_response(error)

    return wrapper


def price_list_service() -> PriceListService:
    return PriceListService(DjangoPriceListStore())


def voucher_service() -> VoucherService:
    return VoucherService(DjangoVoucherStore())


class PriceListListView(APIView):
    """Handler for GET/POST /api/price-lists"""

    @maps_domain_errors
    def get(self, request: Request) -> Response:
        data = cache.get(PRICE_LISTS_KEY)
        if data is None:
            entries = price_list_service().list_price_lists()
            data = PriceListSerializer(entries, many=True).data
            cache.set(PRICE_LISTS_KEY, data, get_setting("LIST_CACHE_TIMEOUT"))
        return Response(data)

    @maps_domain_errors
    def post(self, request: Request) -> Response:
        serializer = PriceListCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        body = serializer.validated_data
        entry = price_list_service().create_price_list(
            code=body["code"],
            name=body["name"],
            interval=body["interval"],
            lines=body["price_lines"],
            description=body["description"],
        )
        return Response(PriceListSerializer(entry).data, status=status.HTTP_201_CREATED)


class CurrentPriceListView(APIView):
    """Handler for GET /api/price-lists/current"""

    @maps_domain_errors
    def get(self, request: Request) -> Response:
        entry = price_list_service().current_price_list()
        if entry is None:
            return Response(
                {"code": ErrorCode.PRICE_LIST_NOT_FOUND.value, "message": "No price list is active today"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(PriceListSerializer(entry).data)


class GapReportView(APIView):
    """Handler for GET /api/price-lists/gaps"""

    @maps_domain_errors
    def get(self, request: Request) -> Response:
        data = cache.get(GAPS_KEY)
        if data is None:
            data = GapReportSerializer(price_list_service().detect_time_gaps()).data
            cache.set(GAPS_KEY, data, get_setting("GAP_CACHE_TIMEOUT"))
        return Response(data)


class NextSlotView(APIView):
    """Handler for GET /api/price-lists/next-slot"""

    @maps_domain_errors
    def get(self, request: Request) -> Response:
        return Response({"start": price_list_service().next_free_start().isoformat()})


class BlockedDaysView(APIView):
    """Handler for GET /api/price-lists/blocked-days?start=&end="""

    @maps_domain_errors
    def get(self, request: Request) -> Response:
        serializer = BlockedDaysSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        days = price_list_service().blocked_days(serializer.validated_data["window"])
        return Response({"blocked": [day.isoformat() for day in days]})


class PriceListDetailView(APIView):
    """Handler for GET/DELETE /api/price-lists/{price_list_id}"""

    @maps_domain_errors
    def get(self, request: Request, price_list_id: str) -> Response:
        return Response(PriceListSerializer(price_list_service().get_price_list(price_list_id)).data)

    @maps_domain_errors
    def delete(self, request: Request, price_list_id: str) -> Response:
        price_list_service().delete_price_list(price_list_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PriceListEndDateView(APIView):
    """Handler for PATCH /api/price-lists/{price_list_id}/end-date"""

    @maps_domain_errors
    def patch(self, request: Request, price_list_id: str) -> Response:
        serializer = EndDateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = price_list_service().update_end_date(price_list_id, serializer.validated_data["end"])
        return Response(PriceListSerializer(entry).data)


class PriceListDuplicateView(APIView):
    """Handler for POST /api/price-lists/{price_list_id}/duplicate"""

    @maps_domain_errors
    def post(self, request: Request, price_list_id: str) -> Response:
        serializer = DuplicateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        body = serializer.validated_data
        entry = price_list_service().duplicate(
            price_list_id, code=body["code"], name=body["name"], interval=body["interval"]
        )
        return Response(PriceListSerializer(entry).data, status=status.HTTP_201_CREATED)


class PriceListSplitView(APIView):
    """Handler for POST /api/price-lists/{price_list_id}/split"""

    @maps_domain_errors
    def post(self, request: Request, price_list_id: str) -> Response:
        serializer = SplitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        body = serializer.validated_data
        source, successor = price_list_service().split_version(
            price_list_id,
            code=body["code"],
            name=body["name"],
            old_end=body["old_end"],
            new_start=body["new_start"],
            new_end=body["new_end"],
        )
        return Response(
            {"source": PriceListSerializer(source).data, "successor": PriceListSerializer(successor).data},
            status=status.HTTP_201_CREATED,
        )


class VoucherListView(APIView):
    """Handler for GET/POST /api/vouchers"""

    @maps_domain_errors
    def get(self, request: Request) -> Response:
        data = cache.get(VOUCHERS_KEY)
        if data is None:
            data = VoucherSerializer(voucher_service().list_vouchers(), many=True).data
            cache.set(VOUCHERS_KEY, data, get_setting("LIST_CACHE_TIMEOUT"))
        return Response(data)

    @maps_domain_errors
    def post(self, request: Request) -> Response:
        serializer = VoucherCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        body = serializer.validated_data
        voucher = voucher_service().create_voucher(
            code=body["code"],
            name=body["name"],
            interval=body["interval"],
            status=body["status"],
            description=body["description"],
        )
        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)


class VoucherReevaluateView(APIView):
    """Handler for POST /api/vouchers/reevaluate

    The console posts here on window focus and on back/forward navigation
    to the voucher view, naming the trigger in the body.
    """

    @maps_domain_errors
    def post(self, request: Request) -> Response:
        serializer = ReevaluateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        trigger = serializer.validated_data["trigger"]
        result = voucher_service().converge()
        logger.info("Voucher re-evaluation (%s) produced %d change(s)", trigger.value, len(result.changes))
        return Response(
            {
                "changes": StatusChangeSerializer(result.changes, many=True).data,
                "failed": [voucher_id.value for voucher_id in result.failed],
                "vouchers": VoucherSerializer(result.vouchers, many=True).data,
            }
        )


class VoucherDetailView(APIView):
    """Handler for GET/DELETE /api/vouchers/{voucher_id}"""

    @maps_domain_errors
    def get(self, request: Request, voucher_id: str) -> Response:
        return Response(VoucherSerializer(voucher_service().get_voucher(voucher_id)).data)

    @maps_domain_errors
    def delete(self, request: Request, voucher_id: str) -> Response:
        voucher_service().delete_voucher(voucher_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class VoucherStatusView(APIView):
    """Handler for PATCH /api/vouchers/{voucher_id}/status"""

    @maps_domain_errors
    def patch(self, request: Request, voucher_id: str) -> Response:
        serializer = VoucherStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        voucher = voucher_service().set_status(voucher_id, serializer.validated_data["status"])
        return Response(VoucherSerializer(voucher).data)


class PromotionLineListView(APIView):
    """Handler for POST /api/vouchers/{voucher_id}/lines"""

    @maps_domain_errors
    def post(self, request: Request, voucher_id: str) -> Response:
        serializer = PromotionLineInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        body = serializer.validated_data
        voucher = voucher_service().add_line(
            voucher_id,
            interval=body["interval"],
            detail=body["promotion_detail"],
            rule=body["rule"],
            status=body["status"],
        )
        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)


class PromotionLineDetailView(APIView):
    """Handler for PUT/DELETE /api/vouchers/{voucher_id}/lines/{code}"""

    @maps_domain_errors
    def put(self, request: Request, voucher_id: str, code: str) -> Response:
        serializer = PromotionLineInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        body = serializer.validated_data
        voucher = voucher_service().update_line(
            voucher_id,
            code,
            interval=body["interval"],
            detail=body["promotion_detail"],
            rule=body["rule"],
            status=body["status"],
        )
        return Response(VoucherSerializer(voucher).data)

    @maps_domain_errors
    def delete(self, request: Request, voucher_id: str, code: str) -> Response:
        voucher = voucher_service().delete_line(voucher_id, code)
        return Response(VoucherSerializer(voucher).data)
