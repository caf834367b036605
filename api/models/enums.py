# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the staffing contract forms service.
"""

from enum import Enum


class QuestionType(str, Enum):
    """Closed set of question variants a contract form may contain."""
    COMMENT = "comment"
    TEXT = "text"
    TEXTAREA = "textarea"
    CHECKBOX = "checkbox"
    CHECKBOX_GROUP = "checkbox_group"
    RADIOBUTTON_GROUP = "radiobutton_group"
    RADIOBUTTON_GROUP_HORIZONTAL = "radiobutton_group_horizontal"
    CONTACT_INFORMATION = "contact_information"
    DATEPICKER = "datepicker"
    TIMEPICKER = "timepicker"


class OwnerKind(str, Enum):
    """Kinds of accounts that can hold references to contract forms."""
    AGENCY = "agency"
    BUSINESS = "business"
    WORKER = "worker"
