# ============================================================
# Django / DRF Imports
# ============================================================
import json
import logging
from decimal import Decimal

from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.pagination import PageNumberPagination
from rest_framework.exceptions import ValidationError

from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

# ============================================================
# Local Imports
# ============================================================
from complaints.models import Complaint
from complaints.serializers import ComplaintSerializer
from home.permissions import IsAdminUser, IsTenantUser
from rooms.models import Room
from tenants.models import Tenant
from .allocation_engine import AllocationEngine, AllocationRequest, GatewayReference
from .exceptions import AllocationError, GatewayError
from .models import AuditLog, Payment, RentCycle
from .pending_lookup import default_lookup
from .razorpay_service import RazorpayService
from .utils import to_money
from .serializers import (
    CreateOrderSerializer,
    MarkPaymentSerializer,
    PaymentSerializer,
    VerifyPaymentSerializer,
)


logger = logging.getLogger(__name__)


def client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def pending_summary(tenant):
    cycles = default_lookup().list_pending(tenant.id)
    return {
        "tenant_id": tenant.id,
        "cycles": [c.as_dict() for c in cycles],
        "total_pending": str(sum((c.pending_amount for c in cycles), Decimal("0.00"))),
    }


# ============================================
#   Admin: record a manual payment
# ============================================
class MarkPaymentAPIView(APIView):
    """
    Admin records cash, bank transfer or manual UPI rent.
    Without rent_cycle_id the amount is spread over pending cycles, oldest first.
    """
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(
        operation_summary="Mark Payment",
        request_body=MarkPaymentSerializer,
        responses={
            200: openapi.Response(
                description="Payment recorded",
                examples={"application/json": {
                    "success": True,
                    "message": "Payment recorded successfully",
                    "paymentsCreated": 2
                }}
            ),
            400: "Validation Error",
            403: "Admin access required",
        },
        tags=["Payments"]
    )
    def post(self, request):
        try:
            serializer = MarkPaymentSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            data = serializer.validated_data

            result = AllocationEngine().allocate(AllocationRequest(
                tenant_id=data['tenant_id'],
                amount=data['amount'],
                payment_mode=data['payment_mode'],
                target_cycle_id=data.get('rent_cycle_id'),
                payment_date=data.get('payment_date'),
                notes=data.get('notes') or None,
                actor=request.user,
                source=AllocationRequest.SOURCE_MANUAL,
            ))

            AuditLog.objects.create(
                action_type=AuditLog.PAYMENT_RECORDED,
                user=request.user,
                tenant_id=data['tenant_id'],
                description=f"{data['payment_mode']} payment of {data['amount']} recorded",
                metadata={
                    "allocations": [[cycle_id, str(amount)] for cycle_id, amount in result.allocations],
                    "advance_cycle_id": result.advance_cycle_id,
                },
                ip_address=client_ip(request),
            )

            logger.info(
                f"[MarkPayment] {request.user.email} recorded {data['amount']} for tenant "
                f"{data['tenant_id']} across {result.payments_created} cycle(s)"
            )
            return Response({
                "success": True,
                "message": "Payment recorded successfully",
                "paymentsCreated": result.payments_created,
            }, status=status.HTTP_200_OK)

        except ValidationError:
            raise
        except AllocationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception as e:
            logger.exception(f"[MarkPayment] Error recording payment: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================
#   Admin: payment ledger
# ============================================
class PaymentListAPIView(APIView):
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(
        operation_summary="List Payments",
        manual_parameters=[
            openapi.Parameter('tenant_id', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
            openapi.Parameter(
                'payment_mode', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False,
                enum=[mode for mode, _ in Payment.PAYMENT_MODE_CHOICES]
            ),
        ],
        responses={200: PaymentSerializer(many=True)},
        tags=["Payments"]
    )
    def get(self, request):
        payments = Payment.objects.select_related('tenant__user', 'rent_cycle')

        tenant_id = request.query_params.get('tenant_id')
        if tenant_id:
            payments = payments.filter(tenant_id=tenant_id)
        payment_mode = request.query_params.get('payment_mode')
        if payment_mode:
            payments = payments.filter(payment_mode=payment_mode)

        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(payments, request)
        return paginator.get_paginated_response(PaymentSerializer(page, many=True).data)


# ============================================
#   Pending rent cycles
# ============================================
class TenantPendingCyclesAPIView(APIView):
    """Signed-in tenant: what is still owed, oldest first."""
    permission_classes = [IsTenantUser]

    @swagger_auto_schema(operation_summary="My Pending Rent", tags=["Rent Cycles"])
    def get(self, request):
        tenant = get_object_or_404(Tenant, user=request.user)
        return Response(pending_summary(tenant))


class AdminPendingCyclesAPIView(APIView):
    permission_classes = [IsAdminUser]

    @swagger_auto_schema(operation_summary="Tenant Pending Rent", tags=["Rent Cycles"])
    def get(self, request, tenant_id):
        tenant = get_object_or_404(Tenant, id=tenant_id)
        return Response(pending_summary(tenant))


# ============================================
#   Razorpay: checkout order
# ============================================
class CreateOrderAPIView(APIView):
    permission_classes = [IsTenantUser]

    @swagger_auto_schema(
        operation_summary="Create Razorpay Order",
        request_body=CreateOrderSerializer,
        responses={
            200: openapi.Response(
                description="Order created",
                examples={"application/json": {
                    "orderId": "order_9A33XWu170gUtm",
                    "amount": 500000,
                    "currency": "INR",
                    "keyId": "rzp_test_xxxx"
                }}
            ),
            400: "Validation Error",
            404: "Tenant profile not found",
            502: "Gateway Error",
        },
        tags=["Razorpay"]
    )
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        amount = serializer.validated_data['amount']
        rent_cycle_id = serializer.validated_data.get('rentCycleId')

        try:
            tenant = Tenant.objects.get(user=request.user)
        except Tenant.DoesNotExist:
            return Response({"error": "Tenant profile not found"}, status=status.HTTP_404_NOT_FOUND)

        if rent_cycle_id and not RentCycle.objects.filter(id=rent_cycle_id, tenant=tenant).exists():
            return Response({"error": "Rent cycle not found"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            service = RazorpayService()
            order = service.create_order(amount, rent_cycle_id=rent_cycle_id, user_id=request.user.id)
        except GatewayError as e:
            return Response({"error": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        except Exception as e:
            logger.exception(f"[RazorpayOrder] Error creating order: {str(e)}")
            return Response({"error": str(e) or "Failed to create order"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        AuditLog.objects.create(
            action_type=AuditLog.GATEWAY_ORDER_CREATED,
            user=request.user,
            tenant=tenant,
            description=f"Razorpay order {order['id']} created",
            metadata={"amount": str(amount), "rent_cycle_id": rent_cycle_id},
            ip_address=client_ip(request),
        )

        return Response({
            "orderId": order['id'],
            "amount": order['amount'],
            "currency": order['currency'],
            "keyId": service.key_id,
        })


# ============================================
#   Razorpay: checkout verification
# ============================================
class VerifyPaymentAPIView(APIView):
    """
    Tenant returns from checkout. The signature is checked before anything
    is written; a replayed payment id is acknowledged without a new write.
    """
    permission_classes = [IsTenantUser]

    @swagger_auto_schema(
        operation_summary="Verify Razorpay Payment",
        request_body=VerifyPaymentSerializer,
        responses={
            200: "Payment recorded",
            400: "Invalid signature / amount mismatch / allocation error",
            404: "Tenant profile not found",
            502: "Gateway Error",
        },
        tags=["Razorpay"]
    )
    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order_id = data['razorpay_order_id']
        payment_id = data['razorpay_payment_id']

        try:
            service = RazorpayService()
            if not service.verify_payment_signature(order_id, payment_id, data['razorpay_signature']):
                logger.warning(f"[RazorpayVerify] Signature mismatch for order {order_id} by {request.user.email}")
                AuditLog.objects.create(
                    action_type=AuditLog.GATEWAY_SIGNATURE_REJECTED,
                    user=request.user,
                    description=f"Invalid checkout signature for order {order_id}",
                    metadata={"order_id": order_id, "payment_id": payment_id},
                    ip_address=client_ip(request),
                )
                return Response({"error": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)

            try:
                tenant = Tenant.objects.get(user=request.user)
            except Tenant.DoesNotExist:
                return Response({"error": "Tenant profile not found"}, status=status.HTTP_404_NOT_FOUND)

            # The signature does not cover the amount; the order does
            order_amount = RazorpayService.from_paise(service.fetch_order(order_id).get('amount', 0))
            if order_amount != data['amount']:
                logger.warning(
                    f"[RazorpayVerify] Amount {data['amount']} does not match order {order_id} "
                    f"({order_amount}) for {request.user.email}"
                )
                return Response({"error": "Amount does not match order"}, status=status.HTTP_400_BAD_REQUEST)

            target_cycle_id = data.get('rentCycleId')
            result = AllocationEngine().allocate(AllocationRequest(
                tenant_id=tenant.id,
                amount=order_amount,
                payment_mode=Payment.ONLINE_GATEWAY,
                target_cycle_id=target_cycle_id,
                gateway=GatewayReference(order_id, payment_id, data['razorpay_signature']),
                source=AllocationRequest.SOURCE_CHECKOUT,
            ))

            if result.already_recorded:
                return Response({"success": True, "message": "Payment already recorded"})

            AuditLog.objects.create(
                action_type=AuditLog.GATEWAY_PAYMENT_VERIFIED,
                user=request.user,
                tenant=tenant,
                description=f"Razorpay payment {payment_id} verified",
                metadata={
                    "order_id": order_id,
                    "allocations": [[cycle_id, str(amount)] for cycle_id, amount in result.allocations],
                },
                ip_address=client_ip(request),
            )

            if target_cycle_id:
                message = "Payment recorded successfully"
            else:
                message = f"Payment allocated across {result.payments_created} cycle(s)"
            return Response({"success": True, "message": message})

        except AllocationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except GatewayError as e:
            return Response({"error": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        except Exception as e:
            logger.exception(f"[RazorpayVerify] Error verifying payment {payment_id}: {str(e)}")
            return Response({"error": str(e) or "Verification failed"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================
#   Razorpay: webhook
# ============================================
class RazorpayWebhookAPIView(APIView):
    """
    Server-to-server notification from Razorpay. Authenticated only by the
    X-Razorpay-Signature HMAC over the raw body.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    @swagger_auto_schema(auto_schema=None)
    def post(self, request):
        body = request.body
        signature = request.META.get('HTTP_X_RAZORPAY_SIGNATURE')
        if not signature:
            return Response({"error": "Missing signature"}, status=status.HTTP_400_BAD_REQUEST)

        if not RazorpayService().verify_webhook_signature(body, signature):
            return Response({"error": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            event = json.loads(body)
        except ValueError:
            return Response({"error": "Invalid payload"}, status=status.HTTP_400_BAD_REQUEST)
        if not isinstance(event, dict):
            logger.warning("[RazorpayWebhook] Signed payload is not a JSON object")
            return Response({"error": "Invalid payload"}, status=status.HTTP_400_BAD_REQUEST)

        if event.get('event') != 'payment.captured':
            logger.info(f"[RazorpayWebhook] Ignoring event {event.get('event')}")
            return Response({"status": "ok"})

        entity = self._payment_entity(event)
        if entity is None:
            logger.warning("[RazorpayWebhook] payment.captured without a payment entity")
            return Response({"error": "Invalid payload"}, status=status.HTTP_400_BAD_REQUEST)
        payment_id = entity.get('id')

        try:
            notes = entity.get('notes')
            tenant, target_cycle_id = self._resolve_target(notes if isinstance(notes, dict) else {})
            if tenant is None or not payment_id:
                logger.warning(f"[RazorpayWebhook] Cannot match payment {payment_id} to a tenant")
                return Response({"status": "ok"})

            result = AllocationEngine().allocate(AllocationRequest(
                tenant_id=tenant.id,
                amount=RazorpayService.from_paise(entity.get('amount', 0)),
                payment_mode=Payment.ONLINE_GATEWAY,
                target_cycle_id=target_cycle_id,
                gateway=GatewayReference(entity.get('order_id'), payment_id),
                source=AllocationRequest.SOURCE_WEBHOOK,
            ))

            if not result.already_recorded:
                AuditLog.objects.create(
                    action_type=AuditLog.WEBHOOK_PROCESSED,
                    tenant=tenant,
                    description=f"Webhook recorded Razorpay payment {payment_id}",
                    metadata={
                        "order_id": entity.get('order_id'),
                        "allocations": [[cycle_id, str(amount)] for cycle_id, amount in result.allocations],
                    },
                    ip_address=client_ip(request),
                )
            return Response({"status": "ok"})

        except AllocationError as e:
            # Retrying will not fix a bad target; acknowledge so Razorpay stops
            logger.warning(f"[RazorpayWebhook] Payment {payment_id} not allocated: {str(e)}")
            return Response({"status": "ok"})
        except Exception as e:
            logger.exception(f"[RazorpayWebhook] Error processing payment {payment_id}: {str(e)}")
            return Response({"error": str(e) or "Webhook processing failed"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def _payment_entity(self, event):
        node = event
        for key in ('payload', 'payment', 'entity'):
            node = node.get(key) if isinstance(node, dict) else None
        return node if isinstance(node, dict) else None

    def _resolve_target(self, notes):
        raw_cycle_id = notes.get('rent_cycle_id') or None
        user_id = notes.get('user_id') or None
        try:
            cycle_id = int(raw_cycle_id) if raw_cycle_id else None
        except ValueError:
            raise AllocationError(f"Invalid rent_cycle_id in order notes: {raw_cycle_id}")

        if user_id:
            tenant = Tenant.objects.filter(user_id=user_id).first()
        elif cycle_id:
            cycle = RentCycle.objects.select_related('tenant').filter(id=cycle_id).first()
            tenant = cycle.tenant if cycle else None
        else:
            tenant = None
        return tenant, cycle_id


# ============================================
#   Admin: dashboard
# ============================================
def collection_summary(month, year):
    """Expected, collected and still-pending rent for one month. Waived cycles are left out."""
    cycles = (
        RentCycle.objects
        .filter(due_month=month, due_year=year)
        .exclude(status=RentCycle.WAIVED)
        .with_paid_total()
    )

    expected = collected = pending = Decimal("0.00")
    counts = {RentCycle.PAID: 0, RentCycle.PENDING: 0, RentCycle.OVERDUE: 0}
    for cycle in cycles:
        paid = to_money(cycle.paid_total)
        expected += cycle.total_due
        collected += paid
        pending += max(Decimal("0.00"), cycle.total_due - paid)
        counts[cycle.status] += 1

    return {
        "total_expected": str(expected),
        "total_collected": str(collected),
        "total_pending": str(pending),
        "total_rent_cycles": sum(counts.values()),
        "paid_count": counts[RentCycle.PAID],
        "pending_count": counts[RentCycle.PENDING],
        "overdue_count": counts[RentCycle.OVERDUE],
    }


def occupancy_summary():
    rooms = Room.objects.filter(is_active=True).annotate(
        occupied=Count('tenants', filter=Q(tenants__is_active=True))
    )

    total_beds = occupied_beds = full_rooms = empty_rooms = 0
    for room in rooms:
        total_beds += room.capacity
        occupied_beds += room.occupied
        if room.occupied >= room.capacity:
            full_rooms += 1
        elif room.occupied == 0:
            empty_rooms += 1

    return {
        "total_rooms": len(rooms),
        "full_rooms": full_rooms,
        "empty_rooms": empty_rooms,
        "total_beds": total_beds,
        "occupied_beds": occupied_beds,
        "vacant_beds": max(0, total_beds - occupied_beds),
        "occupancy_rate": round(occupied_beds * 100 / total_beds, 1) if total_beds else 0,
    }


@swagger_auto_schema(
    method='get',
    operation_summary="Admin Dashboard Statistics",
    operation_description="Rent collection for a month (default: current), room occupancy and recent complaints.",
    manual_parameters=[
        openapi.Parameter('month', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
        openapi.Parameter('year', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
    ],
    tags=["Dashboard"]
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def admin_dashboard_stats(request):
    today = timezone.localdate()
    try:
        month = int(request.query_params.get('month', today.month))
        year = int(request.query_params.get('year', today.year))
    except ValueError:
        return Response({"error": "month and year must be integers"}, status=status.HTTP_400_BAD_REQUEST)
    if not 1 <= month <= 12:
        return Response({"error": "month must be between 1 and 12"}, status=status.HTTP_400_BAD_REQUEST)

    recent = Complaint.objects.select_related('tenant__user', 'room', 'assigned_to')[:5]
    return Response({
        "month": month,
        "year": year,
        "collection": collection_summary(month, year),
        "occupancy": occupancy_summary(),
        "complaints": {
            "open_count": Complaint.objects.filter(status=Complaint.OPEN).count(),
            "in_progress_count": Complaint.objects.filter(status=Complaint.IN_PROGRESS).count(),
            "recent": ComplaintSerializer(recent, many=True).data,
        },
    })
