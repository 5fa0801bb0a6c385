from typing import Generic, TypeVar, Optional, Callable, Any, Union
from http import HTTPStatus

T = TypeVar('T')  # Generic type variable
U = TypeVar('U')  # Additional type variable for map operations


class Result(Generic[T]):
    """
    Outcome of a pipeline operation: success, failure or skipped.

    Row-level work in the voucher pipeline never raises for bad data; every
    step returns a Result so the batch loop can keep going and report what
    happened to each row.

    Attributes:
        success (bool): Indicates if the operation was successful
        data (Optional[T]): The result data (only present when success is True)
        error (Optional[str]): Error message (only present when success is False)
        details (Any): Structured error payload (e.g. a RowError) for failures
        status_code (HTTPStatus): HTTP status code (default: 200 for success, 400 for failure)
    """
    def __init__(
        self,
        success: bool,
        data: Optional[T] = None,
        error: Optional[str] = None,
        status_code: Optional[Union[int, HTTPStatus]] = None,
        details: Any = None
    ):
        """
        Initialize a Result object.

        Args:
            success (bool): Whether the operation succeeded
            data (Optional[T], optional): The data returned by a successful operation. Defaults to None.
            error (Optional[str], optional): Error message for a failed operation. Defaults to None.
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code.
                Defaults to 200 for success, 400 for failure.
            details (Any, optional): Structured payload describing the failure. Defaults to None.
        """
        self.success = success
        self.data = data
        self.error = error
        self.details = details

        if status_code is None:
            self.status_code = HTTPStatus.OK if success else HTTPStatus.BAD_REQUEST
        else:
            if isinstance(status_code, int):
                self.status_code = HTTPStatus(status_code)
            else:
                self.status_code = status_code

    @classmethod
    def ok(cls, data: T, status_code: Optional[Union[int, HTTPStatus]] = HTTPStatus.OK) -> "Result[T]":
        """
        Create a successful Result with the provided data.

        Args:
            data (T): The data to be wrapped in the Result
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code. Defaults to 200 OK.

        Returns:
            Result[T]: A successful Result containing the provided data
        """
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(
        cls,
        error: str,
        status_code: Optional[Union[int, HTTPStatus]] = HTTPStatus.BAD_REQUEST,
        details: Any = None
    ) -> "Result[T]":
        """
        Create a failed Result with the provided error message.

        Args:
            error (str): The error message describing the failure
            status_code (Optional[Union[int, HTTPStatus]], optional): HTTP status code. Defaults to 400 BAD_REQUEST.
            details (Any, optional): Structured payload describing the failure.

        Returns:
            Result[T]: A failed Result containing the error message
        """
        return cls(success=False, error=error, status_code=status_code, details=details)

    @classmethod
    def skipped(cls) -> "Result[T]":
        """
        Create a Result for input that was deliberately ignored.

        A skipped Result is neither a success carrying data nor a failure:
        callers must not produce output for it and must not report it.

        Returns:
            Result[T]: A data-less Result with 204 status code
        """
        return cls(success=True, data=None, status_code=HTTPStatus.NO_CONTENT)

    @classmethod
    def unprocessable(cls, error: str = "Unprocessable input") -> "Result[T]":
        """
        Create a failed Result with UNPROCESSABLE_ENTITY status code.

        Args:
            error (str, optional): The error message. Defaults to "Unprocessable input".

        Returns:
            Result[T]: A failed Result with 422 status code
        """
        return cls(success=False, error=error, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)

    @classmethod
    def invalid_input(cls, error: str = "Invalid input data") -> "Result[T]":
        """
        Create a failed Result with BAD_REQUEST status code.

        Args:
            error (str, optional): The error message. Defaults to "Invalid input data".

        Returns:
            Result[T]: A failed Result with 400 status code
        """
        return cls(success=False, error=error, status_code=HTTPStatus.BAD_REQUEST)

    @classmethod
    def server_error(cls, error: str = "Internal server error", details: Any = None) -> "Result[T]":
        """
        Create a failed Result with INTERNAL_SERVER_ERROR status code.

        Args:
            error (str, optional): The error message. Defaults to "Internal server error".
            details (Any, optional): Structured payload describing the failure.

        Returns:
            Result[T]: A failed Result with 500 status code
        """
        return cls(success=False, error=error, status_code=HTTPStatus.INTERNAL_SERVER_ERROR, details=details)

    def is_success(self) -> bool:
        """True for successful and skipped Results."""
        return self.success

    def is_failure(self) -> bool:
        """True only for failed Results."""
        return not self.success

    def is_skipped(self) -> bool:
        """True when the input was ignored on purpose."""
        return self.success and self.status_code == HTTPStatus.NO_CONTENT

    def and_then(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        """
        Chain operations that return Result objects.

        Failures and skips short-circuit: only a success carrying data is
        handed to the next step.

        Args:
            fn (Callable[[T], Result[U]]): Function that takes the success data and returns a new Result

        Returns:
            Result[U]: Either the original failure/skip or the new Result from the function
        """
        if not self.is_success() or self.is_skipped():
            return self  # type: ignore
        return fn(self.data)  # type: ignore

    def __str__(self) -> str:
        status_info = f"{self.status_code.value} {self.status_code.phrase}"
        if self.is_skipped():
            return f"Skipped ({status_info})"
        if self.is_success():
            data_repr = str(self.data)
            # Truncate long data representations
            if len(data_repr) > 100:
                data_repr = f"{data_repr[:97]}..."
            return f"Success ({status_info}): {data_repr}"
        return f"Failure ({status_info}): {self.error}"

    def __repr__(self) -> str:
        return f"Result(success={self.success}, status_code={self.status_code!r}, data={self.data!r}, error={self.error!r})"
