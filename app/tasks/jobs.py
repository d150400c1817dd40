from app.tasks.celery_app import celery
from app.tasks import worker_jobs


@celery.task(name="app.tasks.jobs.process_receipt_queue")
def process_receipt_queue(limit: int = 50):
    return worker_jobs.process_receipt_queue(limit=limit)
