"""Calendar event suggestions and summaries backed by Gemini."""
