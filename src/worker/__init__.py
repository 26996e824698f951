"""Background workers for the invoicing service"""
from .integrity_auditor import IntegrityAuditorWorker

__all__ = ["IntegrityAuditorWorker"]
