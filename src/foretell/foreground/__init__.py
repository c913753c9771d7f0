"""The interactive part: pick a card, fetch its images, show them."""
