from .department import Department
from .subjects import Subject
from .user import User
from .user_role import UserRole
from .teacher_subject import TeacherSubject
from .exam_paper import ExamPaper
from .notification import Notification
from .audit_log import AuditLog
from .exam_session import ExamSession
from .exam import Exam
__all__ = ["Department", "Subject", "User", "UserRole", "TeacherSubject", "ExamPaper", "Notification", "AuditLog", "ExamSession", "Exam"]
