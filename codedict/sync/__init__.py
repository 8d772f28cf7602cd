from .runner import MERGE_STAGE, RECONCILE_STAGE, RegistrySync, RunSummary, StageResult

__all__ = ["MERGE_STAGE", "RECONCILE_STAGE", "RegistrySync", "RunSummary", "StageResult"]
