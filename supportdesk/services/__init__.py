"""
Business Logic Services
"""
