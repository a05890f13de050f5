"""FastAPI surface for the Stripe payment monitor."""
