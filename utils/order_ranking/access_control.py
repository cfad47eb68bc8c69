# utils/order_ranking/access_control.py
"""
Role-based Access Control for Orders and Ranking

- admin: sees and deletes every order, registers orders for any user,
  manages users/fields/metrics
- user (operator): sees and deletes own orders only
"""

import logging
from typing import Any, Optional

from .constants import ADMIN_ROLE

logger = logging.getLogger(__name__)


class AccessControl:
    """
    Manage data access based on the signed-in user's role.

    Usage:
        access = AccessControl(
            user_role=st.session_state.user_role,
            user_id=st.session_state.user_id
        )

        scope = access.get_order_scope()      # 'all' or 'mine'
        if access.can_delete_order(row['user_id']):
            ...
    """

    def __init__(self, user_role: Optional[str], user_id: Any):
        self.user_role = user_role.lower() if user_role else ''
        self.user_id = user_id

        logger.debug(f"AccessControl initialized: role={self.user_role}, user_id={self.user_id}")

    def get_access_level(self) -> str:
        """'full' for admins, 'self' for everyone else."""
        return 'full' if self.user_role == ADMIN_ROLE else 'self'

    def is_admin(self) -> bool:
        return self.get_access_level() == 'full'

    def get_order_scope(self) -> str:
        return 'all' if self.is_admin() else 'mine'

    def can_view_order(self, owner_id: Any) -> bool:
        return self.is_admin() or self._is_self(owner_id)

    def can_delete_order(self, owner_id: Any) -> bool:
        return self.is_admin() or self._is_self(owner_id)

    def can_register_for(self, operator_id: Any) -> bool:
        """Operators register orders for themselves; admins for anyone."""
        return self.is_admin() or self._is_self(operator_id)

    def _is_self(self, other_id: Any) -> bool:
        if self.user_id is None or other_id is None:
            return False
        return str(self.user_id) == str(other_id)
