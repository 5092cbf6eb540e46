from tokenpaint.transaction.auxiliary import AuxiliarySettings
from tokenpaint.transaction.engine import ReadBack, SettingsTransaction
from tokenpaint.transaction.managed import (
    GLOBAL_RULES,
    THEME_RULES,
    ManagedKey,
    ScopeRules,
    SemanticTokenRules,
)

__all__ = [
    "AuxiliarySettings",
    "ReadBack",
    "SettingsTransaction",
    "GLOBAL_RULES",
    "THEME_RULES",
    "ManagedKey",
    "ScopeRules",
    "SemanticTokenRules",
]
