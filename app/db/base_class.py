# /formify-backend/app/db/base_class.py

from sqlalchemy.orm import declarative_base

# The declarative Base that every ORM model in `app/db/models` inherits from.
Base = declarative_base()
