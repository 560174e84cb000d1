"""
Tabela de políticas por tier de leitor.

Cada role de usuário mapeia para uma TierPolicy com prazo de empréstimo,
multa diária, janela para retirar um livro da lista de espera, limite de
empréstimos simultâneos e se o tier tem prioridade na fila.
"""

from dataclasses import dataclass
from decimal import Decimal

from circulation.models.enums import UserRole

LATE_FEE_PER_DAY = Decimal("0.25")


@dataclass(frozen=True)
class TierPolicy:
    """Regras de circulação de um tier."""
    loan_days: int
    late_fee_per_day: Decimal
    hold_claim_hours: int
    checkout_limit: int
    is_priority: bool


TIER_POLICIES: dict[UserRole, TierPolicy] = {
    UserRole.STANDARD: TierPolicy(
        loan_days=14,
        late_fee_per_day=LATE_FEE_PER_DAY,
        hold_claim_hours=24,
        checkout_limit=2,
        is_priority=False,
    ),
    UserRole.PREMIUM: TierPolicy(
        loan_days=17,
        late_fee_per_day=LATE_FEE_PER_DAY,
        hold_claim_hours=48,
        checkout_limit=5,
        is_priority=True,
    ),
    UserRole.LIBRARIAN: TierPolicy(
        loan_days=17,
        late_fee_per_day=LATE_FEE_PER_DAY,
        hold_claim_hours=48,
        checkout_limit=10,
        is_priority=True,
    ),
    UserRole.ADMIN: TierPolicy(
        loan_days=17,
        late_fee_per_day=LATE_FEE_PER_DAY,
        hold_claim_hours=48,
        checkout_limit=10,
        is_priority=True,
    ),
}

STAFF_ROLES = (UserRole.LIBRARIAN, UserRole.ADMIN)


def get_policy(role: UserRole) -> TierPolicy:
    """Retorna a política do tier (KeyError para role desconhecida)."""
    return TIER_POLICIES[UserRole(role)]


def is_priority_role(role: UserRole) -> bool:
    """Premium, librarian e admin têm prioridade na lista de espera."""
    return get_policy(role).is_priority


def is_staff_role(role: UserRole) -> bool:
    """Librarian e admin podem executar ações administrativas."""
    return UserRole(role) in STAFF_ROLES
