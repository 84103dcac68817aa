# backend/docscan/utils/__init__.py
