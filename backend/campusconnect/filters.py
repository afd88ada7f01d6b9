from enum import Enum


class ClassMatch(str, Enum):
    """How a class label from the caller is compared with stored labels.

    Views differ here: both attendance views ignore case, every other view
    and every delete compares exactly.
    """
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"


def class_filter(column, class_name: str, match: ClassMatch = ClassMatch.EXACT):
    if match is ClassMatch.CASE_INSENSITIVE:
        return column.ilike(class_name.strip())
    return column == class_name
