"""Serializers used by the API views to validate incoming requests."""
from rest_framework import serializers


class EquipmentUploadSerializer(serializers.Serializer):
    """
    Minimal serializer that just checks we actually received a file.

    It feels a bit overkill for a single field, but it keeps the view
    code honest.
    """

    file = serializers.FileField()


class EnrichmentRequestSerializer(serializers.Serializer):
    """Which summary to enrich, and the generation the client saw it with."""

    summary_id = serializers.CharField(max_length=64)
    generation = serializers.IntegerField(required=False, min_value=0)


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(trim_whitespace=False, style={"input_type": "password"})
