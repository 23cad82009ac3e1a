# reports/views.py
"""
Export endpoint.

GET /api/export/<dataset>/?format=csv|xlsx|txt|pdf&locale=tr-TR|en-US&date_format=...

``format`` is a dataset query parameter here, so DRF's URL format
override is disabled in settings (REST_FRAMEWORK["URL_FORMAT_OVERRIDE"]).
"""

import logging

from django.conf import settings
from django.http import Http404
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from reports.datasets import DATASETS, columns_for, export_filename
from reports.exports import ExportOptions, create_export_response
from reports.serializers import ExportQuerySerializer

logger = logging.getLogger(__name__)


class ExportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, dataset):
        actor = resolve_actor(request)
        require(actor, "reports.export")

        if dataset not in DATASETS:
            raise Http404("Bilinmeyen veri seti")
        config = DATASETS[dataset]
        require(actor, config["permission"])

        # plain dict: a missing BooleanField in a QueryDict reads as False
        query = ExportQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        params = dict(query.validated_data)

        locale = params.pop("locale", None) or getattr(settings, "FINBOT_EXPORT_LOCALE", "tr-TR")
        options = ExportOptions(
            locale=locale,
            date_format=params.pop("date_format", ""),
            currency=actor.company.default_currency,
            show_currency=params.pop("show_currency"),
            include_headers=params.pop("include_headers"),
        )
        export_format = params.pop("format")
        params["locale"] = locale

        data = config["prepare"](actor.company, params)

        logger.info(
            "Export generated",
            extra={
                "company_id": actor.company.id,
                "dataset": dataset,
                "export_format": export_format,
                "rows": len(data),
            },
        )

        return create_export_response(
            data=data,
            columns=columns_for(dataset, locale),
            format=export_format,
            filename=export_filename(dataset, locale),
            title=config["title"][locale],
            options=options,
        )
