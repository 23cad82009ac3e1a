"""
DRF exception handler with Turkish messages.

Errors raised by the command layer already carry Turkish text
("Yetersiz bakiye", "Kasa bulunamadı", ...). This handler only swaps the
English defaults DRF uses when an exception is raised without a message.
"""
import logging

from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

TURKISH_DEFAULTS = {
    exceptions.NotAuthenticated: "Kimlik doğrulama bilgileri sağlanmadı.",
    exceptions.AuthenticationFailed: "Geçersiz kimlik doğrulama bilgileri.",
    exceptions.PermissionDenied: "Bu işlem için yetkiniz yok.",
    exceptions.NotFound: "Kayıt bulunamadı.",
    exceptions.ParseError: "Geçersiz istek gövdesi.",
    exceptions.UnsupportedMediaType: "Desteklenmeyen içerik türü.",
}


def finbot_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.Throttled):
        wait = exc.wait
        if wait is not None:
            response.data = {"detail": f"Çok fazla istek. {int(wait)} saniye sonra tekrar deneyin."}
        else:
            response.data = {"detail": "Çok fazla istek. Lütfen daha sonra tekrar deneyin."}
        return response

    if isinstance(exc, exceptions.MethodNotAllowed):
        response.data = {"detail": f"{context['request'].method} isteği desteklenmiyor."}
        return response

    # Http404 and django PermissionDenied arrive here already converted
    detail = response.data.get("detail") if isinstance(response.data, dict) else None
    for exc_class, message in TURKISH_DEFAULTS.items():
        if detail is not None and str(detail) == str(exc_class.default_detail):
            response.data = {"detail": message}
            break

    if response.status_code >= 500:
        view = context.get("view")
        logger.error(
            "Unhandled API error",
            extra={"view": view.__class__.__name__ if view else None, "error": str(exc)},
        )

    return response
