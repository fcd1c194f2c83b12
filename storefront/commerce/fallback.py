"""
Repli déclaratif "champ optionnel": si Shopify rejette une mutation à cause d'un champ
optionnel (ex: téléphone invalide), on rejoue une fois la mutation sans ce champ.

Les règles sont évaluées dans l'ordre; chacune ne s'applique qu'une fois par appel.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Sequence, Tuple, TypeVar
import logging

from storefront.errors import CommerceUserError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OptionalFieldFallback:
    field: str
    signatures: Tuple[str, ...]

    def matches(self, error: Exception, payload: Dict[str, Any]) -> bool:
        if self.field not in payload:
            return False
        message = str(error)
        return any(sig in message for sig in self.signatures)


CUSTOMER_UPDATE_FALLBACKS: Tuple[OptionalFieldFallback, ...] = (
    OptionalFieldFallback("phone", ("Phone is invalid", "Phone has already been taken")),
)


async def call_with_fallbacks(
    call: Callable[[Dict[str, Any]], Awaitable[T]],
    payload: Dict[str, Any],
    fallbacks: Sequence[OptionalFieldFallback],
) -> Tuple[T, List[str]]:
    """
    Appelle `call(payload)`; sur CommerceUserError correspondant à une règle,
    retire le champ concerné et rejoue. Retourne (résultat, champs_retirés).
    Toute autre erreur, ou une erreur sans règle applicable, est propagée.
    """
    current = dict(payload)
    remaining = list(fallbacks)
    skipped: List[str] = []
    while True:
        try:
            return await call(current), skipped
        except CommerceUserError as e:
            rule = next((r for r in remaining if r.matches(e, current)), None)
            if rule is None:
                raise
            remaining.remove(rule)
            current = {k: v for k, v in current.items() if k != rule.field}
            skipped.append(rule.field)
            logger.info("commerce.fallback retry_without=%s error=%s", rule.field, e)
