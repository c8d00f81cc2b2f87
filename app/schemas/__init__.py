"""Request and response models validated at the API boundary."""
