"""Small encoding helpers shared by the codec."""
