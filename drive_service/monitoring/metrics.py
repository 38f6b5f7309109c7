# drive_service/monitoring/metrics.py
from prometheus_client import Counter, Gauge, Info
from prometheus_fastapi_instrumentator import Instrumentator

# Business Metrics
files_uploaded = Counter(
    'drive_files_uploaded_total',
    'Total number of files uploaded',
)

bytes_uploaded = Counter(
    'drive_bytes_uploaded_total',
    'Total bytes accepted by uploads',
)

uploads_rejected = Counter(
    'drive_uploads_rejected_total',
    'Uploads refused before anything was stored',
    ['reason'],
)

files_deleted = Counter(
    'drive_files_deleted_total',
    'Files soft deleted through the API',
)

folders_deleted = Counter(
    'drive_folders_deleted_total',
    'Folders soft deleted through the API (cascade roots only)',
)

storage_used_bytes = Gauge(
    'drive_storage_used_bytes',
    'Storage used by the caller after the last quota change',
)

service_info = Info('drive_service', 'Service information')


class MetricsCollector:
    def __init__(self):
        self.instrumentator = Instrumentator(
            should_group_status_codes=False,
            should_ignore_untemplated=True,
            should_instrument_requests_inprogress=True,
            excluded_handlers=["/metrics", "/api/health"],
            inprogress_name="drive_requests_inprogress",
            inprogress_labels=True,
        )
        self._instrumented = False

    def instrument_app(self, app, version: str):
        """Add automatic instrumentation to FastAPI app (also exposes /metrics)"""
        # HTTP collectors live in the process-wide registry, so only the
        # first app gets the middleware
        if self._instrumented:
            self.instrumentator.expose(app, endpoint="/metrics")
        else:
            self.instrumentator.instrument(app).expose(app, endpoint="/metrics")
        self._instrumented = True
        service_info.info({'version': version})


metrics_collector = MetricsCollector()
