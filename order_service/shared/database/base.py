from sqlalchemy.orm import declarative_base

# Declarative base for every ORM model in the service
Base = declarative_base()
