"""
Erreurs métier du checkout, traduites en réponses HTTP par app_setup.exceptions.

- ValidationError (400): panier vide/malformé, profit négatif. L'appelant corrige sa requête.
- ConfigurationError (500): clé/secret manquant. À corriger côté opérateur.
- UpstreamError (500): passerelle ou service de taux en échec (réseau, timeout, réponse non-succès).
- PersistenceError (500): écriture/lecture du ledger en échec.
"""

# module dropship.errors
class CheckoutError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CheckoutError):
    status_code = 400


class ConfigurationError(CheckoutError):
    status_code = 500


class UpstreamError(CheckoutError):
    status_code = 500


class PersistenceError(CheckoutError):
    status_code = 500
