"""Conversational assistant for a Chhattisgarhi culture site: grounded, tone-conditioned replies."""
