# Shared data models
