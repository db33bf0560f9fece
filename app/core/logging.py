"""
Configuration du logging structuré JSON.

Chaque log contient:
- timestamp: ISO8601
- level: DEBUG/INFO/WARNING/ERROR/CRITICAL
- message: message principal
- user_id: utilisateur concerné (optionnel)
- deal_id: deal concerné (optionnel)
- trace_id: ID de traçage pour corrélation (optionnel)
- duration_ms: durée en ms (optionnel)
- extra: données additionnelles
"""
import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

# Context variable pour le trace_id (propagé à travers les appels)
_trace_id: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)

# Borne la longueur des X-Request-ID clients recopiés dans chaque ligne de log
MAX_TRACE_ID_LENGTH = 64


def get_trace_id() -> Optional[str]:
    """Récupère le trace_id courant."""
    return _trace_id.get()


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Définit un trace_id. Génère un nouveau si non fourni, tronque sinon."""
    if not trace_id:
        trace_id = str(uuid.uuid4())[:8]
    trace_id = trace_id[:MAX_TRACE_ID_LENGTH]
    _trace_id.set(trace_id)
    return trace_id


class JSONFormatter(logging.Formatter):
    """Formatter qui produit des logs en JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = get_trace_id()
        if trace_id:
            log_data["trace_id"] = trace_id

        for key in ("user_id", "deal_id", "duration_ms", "job_id", "status_code", "error_type"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data") and record.extra_data:
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, ensure_ascii=False, default=str)


class StructuredLogger:
    """
    Logger structuré avec méthodes helper pour le contexte bookmarks.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        message: str,
        user_id: Optional[str] = None,
        deal_id: Optional[str] = None,
        duration_ms: Optional[float] = None,
        job_id: Optional[str] = None,
        error_type: Optional[str] = None,
        status_code: Optional[int] = None,
        exc_info: bool = False,
        **extra
    ):
        """Log avec contexte structuré."""
        extra_dict = {k: v for k, v in extra.items() if v is not None}

        record_extra = {}
        if user_id:
            record_extra["user_id"] = user_id
        if deal_id:
            record_extra["deal_id"] = deal_id
        if duration_ms is not None:
            record_extra["duration_ms"] = round(duration_ms, 2)
        if job_id:
            record_extra["job_id"] = job_id
        if error_type:
            record_extra["error_type"] = error_type
        if status_code:
            record_extra["status_code"] = status_code
        if extra_dict:
            record_extra["extra_data"] = extra_dict

        self._logger.log(level, message, exc_info=exc_info, extra=record_extra)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = True, **kwargs):
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info: bool = True, **kwargs):
        self._log(logging.CRITICAL, message, exc_info=exc_info, **kwargs)

    # Méthodes spécialisées pour les bookmarks

    def bookmark_saved(self, user_id: str, deal_id: str, bookmark_id: int):
        """Log un bookmark créé."""
        self.info("bookmark_saved", user_id=user_id, deal_id=deal_id, bookmark_id=bookmark_id)

    def bookmark_removed(self, user_id: str, deal_id: str):
        """Log un bookmark supprimé."""
        self.info("bookmark_removed", user_id=user_id, deal_id=deal_id)

    def bookmark_conflict(self, user_id: str, deal_id: str, reason: str, detected_by: str):
        """Log un conflit (pré-check ou contrainte d'unicité)."""
        self.info(
            "bookmark_conflict",
            user_id=user_id,
            deal_id=deal_id,
            reason=reason,
            detected_by=detected_by,
        )

    def counter_error(self, deal_id: str, delta: int, error: Exception):
        """Log un échec de mise à jour du save_count."""
        self.error(
            f"save_count_update_failed: {error}",
            deal_id=deal_id,
            delta=delta,
            error_type=type(error).__name__,
            exc_info=False,  # L'erreur est déjà dans le message
        )

    def counter_drift(self, deal_id: str, cached: int, actual: int):
        """Log une dérive du save_count corrigée."""
        self.warning(
            "save_count_drift",
            deal_id=deal_id,
            cached=cached,
            actual=actual,
        )


def setup_logging(level: str = "INFO"):
    """
    Configure le logging pour l'application.

    Args:
        level: Niveau de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Supprimer les handlers existants
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    # Réduire le bruit des libs externes
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("rq.worker").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Obtient un logger structuré."""
    return StructuredLogger(name)


def timed(logger: Optional[StructuredLogger] = None):
    """
    Décorateur pour mesurer et logger la durée d'une fonction.

    Usage:
        @timed(logger)
        def my_function():
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.perf_counter() - start) * 1000
                if logger:
                    logger.debug(
                        f"{func.__name__} completed",
                        duration_ms=duration_ms,
                    )
                return result
            except Exception as e:
                duration_ms = (time.perf_counter() - start) * 1000
                if logger:
                    logger.error(
                        f"{func.__name__} failed",
                        duration_ms=duration_ms,
                        error_type=type(e).__name__,
                    )
                raise
        return wrapper
    return decorator
