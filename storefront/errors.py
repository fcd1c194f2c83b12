"""
Taxonomie des erreurs du pipeline de checkout.

- ConfigurationError: identifiants absents ou encore en valeur d'exemple (jamais envoyés sur le réseau)
- UpstreamUnavailable: toutes les versions d'API ont échoué (conserve la dernière cause)
- CommerceUserError: userErrors/customerUserErrors renvoyés par Shopify, messages joints
- ValidationError: requête invalide détectée avant un appel externe payant
- PaymentDeclined / PaymentCanceled: erreurs du processeur de paiement
- OrderCreationFailed: paiement capturé mais commande Shopify non créée (cas le plus grave)
- BridgeError: réponse non-2xx du bridge de paiement
"""
from typing import Iterable, Optional


class StorefrontError(Exception):
    """Racine commune de toutes les erreurs applicatives."""


class ConfigurationError(StorefrontError):
    pass


class UpstreamUnavailable(StorefrontError):
    def __init__(self, message: str, last_error: Optional[str] = None):
        super().__init__(message)
        self.last_error = last_error


class CommerceUserError(StorefrontError):
    def __init__(self, messages: Iterable[str]):
        self.messages = [m for m in messages if m]
        super().__init__(", ".join(self.messages))


class ValidationError(StorefrontError):
    pass


class PaymentDeclined(StorefrontError):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class PaymentCanceled(StorefrontError):
    pass


class OrderCreationFailed(StorefrontError):
    def __init__(self, transaction_id: str, message: str):
        super().__init__(message)
        self.transaction_id = transaction_id


class BridgeError(StorefrontError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
