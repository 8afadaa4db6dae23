"""Infrastructure adapters: cache, store and message feed"""
