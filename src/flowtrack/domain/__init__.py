"""Domain layer: work item model, reconciliation and development-time rules."""
