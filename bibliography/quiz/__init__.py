"""
Quiz package: question bank, session flow and submission logging.

``bank`` loads the static questions, ``session`` drives one attempt
from difficulty selection to review, and ``router`` serves the
questions and the ``/api/log-quiz`` endpoint backed by ``sink``.
"""

from .router import router as quiz_router  # noqa: F401
