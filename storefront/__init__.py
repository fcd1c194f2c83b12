"""
Storefront checkout: client Shopify Storefront, panier, orchestrateur de checkout
et bridge de paiement (Stripe + Shopify Admin).
"""

__version__ = "0.1.0"
