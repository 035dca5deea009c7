"""
Search Serializers

Validate search and suggestion requests. Responses are built from the
service value objects' ``to_dict()``.
"""

from rest_framework import serializers

from propsearch.config import config

from .query_sanitizer import MAX_PARTIAL_LENGTH, sanitize_history, sanitize_query, validate_query


class SearchBehaviorSerializer(serializers.Serializer):
    """Optional behaviour signals sent alongside a search."""
    previous_searches = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False, default=list
    )
    saved_listing_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list, max_length=100
    )
    clicked_listing_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list, max_length=100
    )

    def validate_previous_searches(self, value):
        return sanitize_history(value)


class SearchRequestSerializer(serializers.Serializer):
    text = serializers.CharField(trim_whitespace=True)
    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=config.search.max_result_limit,
        default=config.search.default_result_limit,
    )
    behavior = SearchBehaviorSerializer(required=False, allow_null=True)

    def validate_text(self, value):
        text = sanitize_query(value)
        error = validate_query(text)
        if error:
            raise serializers.ValidationError(error)
        return text


class SuggestionRequestSerializer(serializers.Serializer):
    partial = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=True)
    history = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)

    def validate_partial(self, value):
        return sanitize_query(value, max_length=MAX_PARTIAL_LENGTH)

    def validate_history(self, value):
        return sanitize_history(value)
