"""
Database models package
"""
from assessment_engine.models.folder import Folder
from assessment_engine.models.material import Material
from assessment_engine.models.quiz import Quiz, Question, AnswerOption
from assessment_engine.models.response import ResponseRecord, CompletionRecord

__all__ = ["Folder", "Material", "Quiz", "Question", "AnswerOption", "ResponseRecord", "CompletionRecord"]
