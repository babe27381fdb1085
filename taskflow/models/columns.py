# backend/taskflow/models/columns.py
from .. import db

# BIGINT keys on MySQL; SQLite only auto-increments INTEGER PRIMARY KEY
BigId = db.BigInteger().with_variant(db.Integer(), "sqlite")
