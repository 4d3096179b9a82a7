# testrequests/filters.py
import django_filters as df

from .choices import RequestStatus
from .models import TestRequest


class TestRequestFilter(df.FilterSet):
    status = df.ChoiceFilter(choices=RequestStatus.choices)
    created_at = df.DateFromToRangeFilter()

    class Meta:
        model = TestRequest
        fields = ["status", "created_at"]
