"""Domain Layer: value objects, models, events and the ports (interfaces)
that the infrastructure layer implements.
"""
