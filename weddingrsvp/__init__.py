"""WeddingRSVP: RSVP collection for a single wedding."""
