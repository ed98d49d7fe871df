from rest_framework import serializers
from .models import Country
from .store import SORT_GDP_DESC


class CountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = [
            'id', 'name', 'capital', 'region', 'population',
            'currency_code', 'exchange_rate', 'estimated_gdp',
            'flag_url', 'last_refreshed_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CountryQuerySerializer(serializers.Serializer):
    """
    Query parameters accepted by GET /countries.

    - region: exact match
    - currency: matched upper-cased
    - sort: only gdp_desc; default ordering is by name
    """
    region = serializers.CharField(required=False, allow_blank=True)
    currency = serializers.CharField(required=False, allow_blank=True)
    sort = serializers.ChoiceField(
        choices=[SORT_GDP_DESC],
        required=False,
        allow_blank=True,
        error_messages={"invalid_choice": "Invalid sort parameter. Allowed values: " + SORT_GDP_DESC},
    )

    def validate_currency(self, value):
        return value.strip().upper()


class ApiStatusSerializer(serializers.Serializer):
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.CharField(allow_null=True)
