"""Serializers for request validation and domain model responses."""

from rest_framework import serializers

from registrations.domain import (
    ActorRole,
    PaymentStatus,
    RegistrationStatus,
    ResourceKind,
    ResourceStatus,
)
from registrations.domain.lifecycle import ResourceEvent


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class EnumValueField(serializers.Field):
    """Renders an Enum member as its value."""

    def to_representation(self, value):
        return value.value


class ValueObjectField(serializers.Field):
    """Renders a single-field value object (ids, capacity, rating) as its value."""

    def to_representation(self, value):
        return value.value


class ResourceSerializer(serializers.Serializer):
    """Serializer for Resource domain model."""

    id = serializers.UUIDField(source="id.value")
    kind = EnumValueField()
    title = serializers.CharField()
    starts_at = serializers.DateTimeField()
    registration_deadline = serializers.DateTimeField(allow_null=True)
    capacity = ValueObjectField(allow_null=True)
    status = EnumValueField()
    requires_approval = serializers.BooleanField()
    certificate_threshold = ValueObjectField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    id = serializers.UUIDField(source="id.value")
    resource_id = serializers.UUIDField(source="resource_id.value")
    registration_number = serializers.CharField()
    email = serializers.CharField(source="identity.value")
    full_name = serializers.CharField()
    details = serializers.JSONField()
    status = EnumValueField()
    attended = serializers.BooleanField()
    attendance_percentage = ValueObjectField(allow_null=True)
    rating = ValueObjectField(allow_null=True)
    feedback = serializers.CharField(allow_null=True)
    certificate_requested = serializers.BooleanField()
    certificate_issued = serializers.BooleanField()
    payment_status = EnumValueField()
    cancellation_reason = serializers.CharField(allow_null=True)
    cancelled_by = EnumValueField(allow_null=True)
    confirmed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    attendance_marked_at = serializers.DateTimeField(allow_null=True)
    certificate_issued_at = serializers.DateTimeField(allow_null=True)
    agreed_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class AvailabilitySerializer(serializers.Serializer):
    resource_id = serializers.UUIDField(source="resource_id.value")
    capacity = serializers.IntegerField(allow_null=True)
    admitted = serializers.IntegerField()
    remaining = serializers.IntegerField(allow_null=True)


class ResourceCreateSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=_values(ResourceKind))
    title = serializers.CharField(max_length=255)
    starts_at = serializers.DateTimeField()
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True)
    capacity = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    requires_approval = serializers.BooleanField(required=False, default=False)
    certificate_threshold = serializers.IntegerField(
        required=False, allow_null=True, min_value=0, max_value=100
    )


class ResourceUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, max_length=255)
    starts_at = serializers.DateTimeField(required=False)
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True)
    capacity = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    requires_approval = serializers.BooleanField(required=False)
    certificate_threshold = serializers.IntegerField(
        required=False, allow_null=True, min_value=0, max_value=100
    )


class ResourceListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=_values(ResourceStatus), required=False)


class TransitionSerializer(serializers.Serializer):
    event = serializers.ChoiceField(choices=_values(ResourceEvent))


class RegistrationSubmitSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=255)
    full_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    details = serializers.DictField(required=False, default=dict)
    certificate_requested = serializers.BooleanField(required=False, default=False)
    agreed_to_terms = serializers.BooleanField()

    def validate_agreed_to_terms(self, value: bool) -> bool:
        if not value:
            raise serializers.ValidationError(
                "You must agree to terms and conditions to register"
            )
        return value


class RegistrationListQuerySerializer(serializers.Serializer):
    resource = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=_values(RegistrationStatus), required=False)
    email = serializers.EmailField(required=False)
    payment_status = serializers.ChoiceField(choices=_values(PaymentStatus), required=False)


class CancelSerializer(serializers.Serializer):
    actor = serializers.ChoiceField(choices=_values(ActorRole), default=ActorRole.ADMIN.value)
    email = serializers.EmailField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs: dict) -> dict:
        if attrs["actor"] == ActorRole.REGISTRANT.value and not attrs.get("email"):
            raise serializers.ValidationError({"email": "Registrants must identify themselves"})
        return attrs


class AttendanceSerializer(serializers.Serializer):
    attended = serializers.BooleanField()
    attendance_percentage = serializers.IntegerField(
        required=False, allow_null=True, min_value=0, max_value=100
    )


class FeedbackSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    feedback = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PaymentSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=_values(PaymentStatus))
