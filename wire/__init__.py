"""Protocol models and envelope helpers shared by the worker bridge."""
