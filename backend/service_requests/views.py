import logging

from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes, renderer_classes
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.permissions import IsAdminUser
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from services.geocoding import GeocodingError
from services.matching import MatchingConflictError, advance, sweep_expired
from services.request_management import (
    NOT_FOUND,
    RequestAccessDeniedError,
    RequestNotFoundError,
    create_service_request,
    get_client_request,
    list_all_requests,
    list_client_requests,
    respond_to_match,
)
from .permissions import HasInternalToken
from .renderers import PlainTextRenderer
from .serializers import (
    AdminServiceRequestSerializer,
    AdvanceSerializer,
    MyRequestsQuerySerializer,
    RespondQuerySerializer,
    ServiceRequestCreateSerializer,
    ServiceRequestDetailSerializer,
    ServiceRequestSerializer,
)

logger = logging.getLogger(__name__)


def _invalid(serializer):
    return Response(
        {'ok': False, 'error': 'invalid payload', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


# ==================== Customer APIs ====================

@api_view(['POST'])
def create_request(request):
    """Create a service request from the order form and start matching"""
    serializer = ServiceRequestCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    try:
        result = create_service_request(**serializer.validated_data)
    except GeocodingError as e:
        return Response(
            {'ok': False, 'error': str(e), 'provider_status': e.provider_status},
            status=status.HTTP_502_BAD_GATEWAY
        )

    first = result.advance
    return Response({
        'ok': True,
        'request': ServiceRequestDetailSerializer(result.service_request).data,
        'match': {
            'outcome': first.outcome,
            'match_id': str(first.match.id) if first.match else None,
        } if first else None,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def my_requests(request):
    """
    Customer dashboard: list requests for an email, or one request with ?id=
    """
    query = MyRequestsQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return _invalid(query)

    client_email = query.validated_data['client_email']
    request_id = query.validated_data.get('id')

    if request_id:
        try:
            service_request = get_client_request(client_email, request_id)
        except RequestNotFoundError:
            return Response({'ok': False, 'error': 'not found'}, status=status.HTTP_404_NOT_FOUND)
        except RequestAccessDeniedError:
            return Response({'ok': False, 'error': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
        return Response({'ok': True, 'request': ServiceRequestDetailSerializer(service_request).data})

    items = ServiceRequestSerializer(list_client_requests(client_email), many=True).data
    return Response({'ok': True, 'items': items})


# ==================== Professional link ====================

@api_view(['GET', 'POST'])
@renderer_classes([PlainTextRenderer, JSONRenderer])
def respond(request):
    """
    Accept or decline an offer from the emailed/pushed link.

    Replies with a plain sentence; clients asking for JSON get the outcome too.
    """
    query = RespondQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return Response(
            {'ok': False, 'message': 'Bad Request', 'details': query.errors},
            status=status.HTTP_400_BAD_REQUEST
        )

    result = respond_to_match(query.validated_data['id'], query.validated_data['status'])

    payload = {
        'ok': result.ok,
        'outcome': result.outcome,
        'message': result.message,
    }
    if result.next_outcome:
        payload['next_outcome'] = result.next_outcome

    status_code = status.HTTP_404_NOT_FOUND if result.outcome == NOT_FOUND else status.HTTP_200_OK
    return Response(payload, status=status_code)


# ==================== Internal triggers ====================

@api_view(['POST'])
@permission_classes([HasInternalToken])
def match_next(request):
    """Advance a request to its next candidate"""
    serializer = AdvanceSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    try:
        result = advance(
            serializer.validated_data['request_id'],
            radius_km=serializer.validated_data.get('radius_km'),
        )
    except MatchingConflictError as e:
        logger.warning("Advance conflict: %s", e)
        return Response({'ok': False, 'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response({
        'ok': True,
        'outcome': result.outcome,
        'match_id': str(result.match.id) if result.match else None,
    })


@api_view(['POST'])
@permission_classes([HasInternalToken])
def check_expired(request):
    """Expire overdue offers and advance their requests"""
    result = sweep_expired()
    return Response({
        'ok': True,
        'expired': result.expired,
        'advanced': result.advanced,
        'exhausted': result.exhausted,
        'failed': result.failed,
    })


# ==================== Admin APIs ====================

class AdminRequestListView(generics.ListAPIView):
    """
    All requests, newest first.

    GET /api/admin/requests/?limit=50&offset=0
    """
    permission_classes = [IsAdminUser]
    serializer_class = AdminServiceRequestSerializer
    pagination_class = LimitOffsetPagination

    def get_queryset(self):
        return list_all_requests().prefetch_related('matches__professional')
