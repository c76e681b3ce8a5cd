"""
Base Tool Infrastructure

Provides the contract-first request/result interface shared by the analysis tools.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from enum import Enum
import time
import psutil
from datetime import datetime

from ..core.logging_config import get_logger

logger = get_logger("tools.base_tool")


class ToolStatus(Enum):
    """Tool operational status"""
    READY = "ready"
    PROCESSING = "processing"
    ERROR = "error"


class ToolErrorCode(Enum):
    """Standardized tool error codes for programmatic handling"""
    # Input/Validation Errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_ORIENTATION = "INVALID_ORIENTATION"
    MISSING_FIELD = "MISSING_FIELD"

    # Data Access Errors
    METADATA_ACCESS = "METADATA_ACCESS"
    EDGE_LOAD = "EDGE_LOAD"

    # Execution Errors
    CANCELLED = "CANCELLED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


@dataclass(frozen=True)
class ToolRequest:
    """Standardized tool input format"""
    tool_id: str
    operation: str
    input_data: Any
    parameters: Dict[str, Any] = field(default_factory=dict)
    context: Optional[Dict[str, Any]] = field(default=None)


@dataclass(frozen=True)
class ToolResult:
    """Standardized tool output format"""
    tool_id: str
    status: str  # "success" or "error"
    data: Any = field(default=None)
    metadata: Dict[str, Any] = field(default_factory=dict)
    execution_time: float = field(default=0.0)
    memory_used: int = field(default=0)
    error_code: Optional[str] = field(default=None)
    error_message: Optional[str] = field(default=None)


@dataclass(frozen=True)
class ToolContract:
    """Tool capability and requirement specification"""
    tool_id: str
    name: str
    description: str
    category: str
    input_schema: Dict[str, Any] = field(default_factory=dict)
    output_schema: Dict[str, Any] = field(default_factory=dict)
    dependencies: List[str] = field(default_factory=list)
    error_conditions: List[str] = field(default_factory=list)


class BaseTool(ABC):
    """Base class all tools inherit from"""

    def __init__(self):
        self.tool_id = self.__class__.__name__  # Override in subclass
        self.status = ToolStatus.READY
        self._start_time = None
        self._start_memory = None

    @abstractmethod
    def get_contract(self) -> ToolContract:
        """Return tool contract specification"""
        pass

    @abstractmethod
    def execute(self, request: ToolRequest) -> ToolResult:
        """Execute tool operation with standardized input/output"""
        pass

    def validate_input(self, input_data: Any) -> bool:
        """Check that every required input key is present"""
        if not isinstance(input_data, dict):
            return False

        contract = self.get_contract()
        required_fields = contract.input_schema.get("required", [])
        return all(name in input_data for name in required_fields)

    def _start_execution(self):
        """Start execution tracking"""
        self._start_time = time.time()
        try:
            self._start_memory = psutil.Process().memory_info().rss
        except psutil.Error as e:
            logger.debug(f"Memory tracking unavailable: {e}")
            self._start_memory = 0
        self.status = ToolStatus.PROCESSING

    def _end_execution(self) -> tuple:
        """End execution tracking and return metrics"""
        execution_time = time.time() - self._start_time if self._start_time else 0.0
        try:
            current_memory = psutil.Process().memory_info().rss
            memory_used = current_memory - self._start_memory if self._start_memory else 0
        except psutil.Error as e:
            logger.debug(f"Memory tracking unavailable: {e}")
            memory_used = 0
        self.status = ToolStatus.READY
        return execution_time, memory_used

    def _create_error_result(self, request: ToolRequest, error_code: str, error_message: str,
                             **context) -> ToolResult:
        """Create standardized error result"""
        execution_time, memory_used = self._end_execution()
        self.status = ToolStatus.ERROR

        metadata = {
            "operation": request.operation,
            "timestamp": datetime.now().isoformat()
        }
        metadata.update(context)

        return ToolResult(
            tool_id=self.tool_id,
            status="error",
            data=None,
            metadata=metadata,
            execution_time=execution_time,
            memory_used=memory_used,
            error_code=error_code,
            error_message=error_message
        )
