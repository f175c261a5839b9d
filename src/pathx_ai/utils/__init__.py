#!filepath: src/pathx_ai/utils/__init__.py
