"""Domain records (users, posts, the JSON document)."""
