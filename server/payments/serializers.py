from rest_framework import serializers

from payments.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ("id", "course", "amount", "currency", "gateway_order_id", "status", "created_at")
        read_only_fields = fields


class CreateOrderIn(serializers.Serializer):
    course = serializers.IntegerField()


class VerifyPaymentIn(serializers.Serializer):
    payment = serializers.IntegerField()
    gateway_order_id = serializers.CharField()
    gateway_payment_id = serializers.CharField()
    gateway_signature = serializers.CharField()
