# app/models/__init__.py
from app.models.book_models import Book
from app.models.discount_models import Discount
from app.models.announcement_models import Announcement
from app.models.activity_models import CatalogActivity
