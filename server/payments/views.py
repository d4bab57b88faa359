from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from learning.serializers import EnrollmentSerializer
from learning.services import get_published_course
from payments.models import Payment
from payments.serializers import CreateOrderIn, PaymentSerializer, VerifyPaymentIn
from payments.services import create_order, verify_payment


class CreateOrderView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=CreateOrderIn, responses={200: dict, 201: PaymentSerializer})
    def post(self, request):
        ser = CreateOrderIn(data=request.data)
        ser.is_valid(raise_exception=True)

        course = get_published_course(ser.validated_data["course"], request.user)
        payment, enrollment = create_order(request.user, course)
        if enrollment is not None:
            return Response({
                "already_enrolled": True,
                "enrollment": EnrollmentSerializer(enrollment).data,
            }, status=status.HTTP_200_OK)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class VerifyPaymentView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=VerifyPaymentIn, responses={200: dict, 201: dict})
    def post(self, request):
        ser = VerifyPaymentIn(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        payment = get_object_or_404(Payment, pk=data["payment"], user=request.user)
        payment, enrollment, completed_now = verify_payment(
            payment,
            data["gateway_order_id"],
            data["gateway_payment_id"],
            data["gateway_signature"],
        )
        return Response({
            "payment": PaymentSerializer(payment).data,
            "enrollment": EnrollmentSerializer(enrollment).data,
        }, status=status.HTTP_201_CREATED if completed_now else status.HTTP_200_OK)
