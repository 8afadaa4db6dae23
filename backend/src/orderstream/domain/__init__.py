"""Domain logic for OrderStream"""
