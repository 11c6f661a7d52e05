import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from django.shortcuts import get_object_or_404

from travelmall.core.utils import create_audit_log, paginate_queryset, parse_bool
from .models import Notification, PushAd, DeviceToken
from .serializers import NotificationSerializer, PublicNotificationSerializer, PushAdSerializer, DeviceTokenSerializer
from .push import send_push_ad, PushDeliveryError

logger = logging.getLogger(__name__)


# Notification views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def notification_list_create(request):
    """List all notifications or create a new one"""
    if request.method == 'GET':
        queryset = Notification.objects.select_related('created_by').order_by('-created_at')
        type_filter = request.query_params.get('type', None)
        if type_filter:
            queryset = queryset.filter(type=type_filter)
        published = parse_bool(request.query_params.get('is_published'))
        if published is not None:
            queryset = queryset.filter(is_published=published)
        return Response(NotificationSerializer(queryset, many=True).data)
    else:
        serializer = NotificationSerializer(data=request.data)
        if serializer.is_valid():
            notification = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='create',
                model_name='Notification',
                object_id=str(notification.id),
                object_name=notification.title,
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def notification_detail(request, pk):
    """Retrieve, update or delete a notification"""
    notification = get_object_or_404(Notification, pk=pk)

    if request.method == 'GET':
        return Response(NotificationSerializer(notification).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = NotificationSerializer(notification, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        title = notification.title
        notification.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Notification',
            object_id=str(pk),
            object_name=title,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def published_notifications(request):
    queryset = Notification.objects.filter(is_published=True).order_by('-created_at')
    return Response(paginate_queryset(request, queryset, PublicNotificationSerializer, default_limit=20))


# Push ad views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def push_ad_list_create(request):
    """List push ads (optionally by ?status=) or create a draft/scheduled ad"""
    if request.method == 'GET':
        queryset = PushAd.objects.prefetch_related('target_users').order_by('-created_at')
        status_filter = request.query_params.get('status', None)
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response(PushAdSerializer(queryset, many=True).data)
    else:
        serializer = PushAdSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        push_ad = serializer.save(created_by=request.user, sent_count=0)
        create_audit_log(
            request=request,
            action='create',
            model_name='PushAd',
            object_id=str(push_ad.id),
            object_name=push_ad.title,
            changes={'status': push_ad.status, 'target_type': push_ad.target_type}
        )
        return Response(PushAdSerializer(push_ad).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def push_ad_detail(request, pk):
    """Retrieve, update or delete a push ad; sent ads are read-only"""
    push_ad = get_object_or_404(PushAd, pk=pk)

    if request.method == 'GET':
        return Response(PushAdSerializer(push_ad).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PushAdSerializer(push_ad, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        push_ad.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def push_ad_send(request, pk):
    """Send a draft or scheduled push ad immediately"""
    push_ad = get_object_or_404(PushAd, pk=pk)
    if not push_ad.is_sendable:
        return Response(
            {'error': f'Push ad is already {push_ad.status}'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        delivered = send_push_ad(push_ad)
    except PushDeliveryError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='push_send',
        model_name='PushAd',
        object_id=str(push_ad.id),
        object_name=push_ad.title,
        changes={'status': push_ad.status, 'sent_count': push_ad.sent_count}
    )
    if not delivered:
        return Response(
            {'error': 'Push delivery failed', 'push_ad': PushAdSerializer(push_ad).data},
            status=status.HTTP_502_BAD_GATEWAY
        )
    logger.info(f"Push ad {push_ad.id} sent by {request.user.username} to {push_ad.sent_count} recipients")
    return Response(PushAdSerializer(push_ad).data)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def device_token_register(request):
    """Register (POST) or deactivate (DELETE) the caller's FCM token"""
    serializer = DeviceTokenSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    token = serializer.validated_data['token']
    if request.method == 'DELETE':
        DeviceToken.objects.filter(token=token, user=request.user).update(is_active=False)
        return Response(status=status.HTTP_204_NO_CONTENT)

    device, created = DeviceToken.objects.update_or_create(
        token=token,
        defaults={
            'user': request.user,
            'platform': serializer.validated_data.get('platform', 'web'),
            'is_active': True,
        }
    )
    return Response(
        DeviceTokenSerializer(device).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )
