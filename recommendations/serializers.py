"""
Recommendation Serializers

Query-parameter validation for the recommendation feeds.
"""

from rest_framework import serializers

MAX_RECOMMENDATIONS = 50


class LimitSerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=MAX_RECOMMENDATIONS)


class PersonalizedQuerySerializer(LimitSerializer):
    user_id = serializers.IntegerField(required=False, min_value=1)


class SimilarQuerySerializer(LimitSerializer):
    listing_id = serializers.IntegerField(min_value=1)


class LocationQuerySerializer(LimitSerializer):
    location = serializers.CharField(max_length=100, trim_whitespace=True)
