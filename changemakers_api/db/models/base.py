from sqlalchemy.ext.declarative import declarative_base

BaseORM = declarative_base()
