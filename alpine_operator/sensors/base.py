"""Base sensor classes for operator monitoring.

This module defines the base OperatorSensor class that provides lifecycle hooks
for monitoring operator events. All hooks are no-ops by default, allowing
subclasses to override only the events they care about.

The hook pattern:
- Hooks come in pairs: on_X_start() and on_X_complete()
- Start hooks return an optional state dict for tracking multi-phase operations
- Complete hooks receive the state dict from their corresponding start hook
"""

from typing import Dict, Optional, Any


class OperatorSensor:
    """Base sensor class for Alpine operator monitoring.

    This class defines lifecycle hooks for two categories:
    1. Reconciliation lifecycle (one pass for one Alpine)
    2. Worker pod operations (pod creation and observed children)

    Example:
        class LoggingSensor(OperatorSensor):
            def on_reconcile_start(self, name, namespace, generation, trigger_source):
                return {'start_time': time.time()}

            def on_reconcile_complete(self, name, namespace, state, success, error=None):
                duration = time.time() - state['start_time']
                logger.info(f"Reconciled {name} in {duration}s")
    """

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        name: str,
        namespace: str,
        generation: Optional[int],
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        """Called when a reconciliation pass begins.

        Args:
            name: Alpine resource name
            namespace: Kubernetes namespace
            generation: Resource generation number
            trigger_source: What triggered reconciliation (start, event, interval)

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a reconciliation pass completes.

        Args:
            name: Alpine resource name
            namespace: Kubernetes namespace
            state: State dict returned from on_reconcile_start
            success: Whether reconciliation succeeded
            error: Exception if reconciliation failed
        """
        pass

    # =============================================================================
    # Worker Pod Hooks
    # =============================================================================

    def on_pod_create_start(
        self,
        name: str,
        pod_name: str,
        namespace: str,
    ) -> Optional[Dict[str, Any]]:
        """Called right before a worker pod is submitted for creation."""
        pass

    def on_pod_create_complete(
        self,
        name: str,
        pod_name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called after the pod creation request returned or failed."""
        pass

    def on_children_observed(
        self,
        name: str,
        namespace: str,
        count: int,
    ) -> None:
        """Called with the number of worker pods seen during a pass."""
        pass
