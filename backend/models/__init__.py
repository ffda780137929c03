from models.base import Base
from models.exam_room import ExamRoom
from models.exam_seating import ExamSeating
from models.exam_session import ExamSession
from models.seating_run import SeatingRun
from models.student import Student

__all__ = [
	"Base",
	"ExamRoom",
	"ExamSeating",
	"ExamSession",
	"SeatingRun",
	"Student",
]
