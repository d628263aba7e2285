from .db import db
from .booking import Booking, BookingStatus
from .court import Court, court_name, find_court
from .user import User, Role
