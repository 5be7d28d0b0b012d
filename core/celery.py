from celery import Celery

from core.config import settings

celery_app = Celery(
    "routegraph",
    broker=settings.celery.CELERY_BROKER_URL,
    backend=settings.celery.CELERY_RESULT_BACKEND,
)

# Configure Celery
celery_app.conf.update(
    # Task settings
    task_time_limit=settings.celery.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=settings.celery.CELERY_TASK_SOFT_TIME_LIMIT,

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Serialization settings
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    enable_utc=True,

    # Task routes
    task_routes={
        "src.route_graph_bc.matching.infrastructure.tasks.*": {"queue": "route_graph"},
    },

    # Beat schedule for periodic tasks
    beat_schedule={
        "rebuild-route-graph": {
            "task": "src.route_graph_bc.matching.infrastructure.tasks.rebuild_route_graph",
            "schedule": float(settings.route_graph.ROUTE_GRAPH_REBUILD_INTERVAL_SECONDS),
            "options": {"queue": "route_graph"},
        },
    },
)

# Autodiscover tasks
celery_app.autodiscover_tasks([
    "src.route_graph_bc.matching.infrastructure",
])
