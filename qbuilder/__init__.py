"""
Questionnaire graph builder.

Translates between an editable graph of questions (with Next/Yes/No
connections and typed trigger criteria) and the flat record list a
questionnaire backend exchanges.
"""

from .config import BuilderSettings
from .graph import EdgeLabel, Question, QuestionGraph, QuestionType
from .records import export_records, import_records
from .session import EditorSession, IllegalCriterion

__all__ = [
    "BuilderSettings",
    "EdgeLabel",
    "Question",
    "QuestionGraph",
    "QuestionType",
    "export_records",
    "import_records",
    "EditorSession",
    "IllegalCriterion",
]
