"""
AI Interview Assistant.

Voice-driven interview loop: record an answer, transcribe it, fetch the next
question from the question service, and speak it back.
"""
