from .auth import BaseResponse, Error, LoginRequest, RegisterRequest, Token, TokenData
from .user import User
from .ledger import TopUpRequest, TransactionRecordSchema
from .order import OrderSchema, PurchaseRequest
from .report import CommentTarget, OrderViolationTarget, PostingTarget, ReportTarget
from .review import ReviewCreate, ReviewSchema
