import numpy as np


class Matrix:
    """Dense 2-D matrix backed by a row-major numpy array.

    Arithmetic returns new matrices. Only the augmented operators
    (+=, -=, *=, /=) modify a matrix in place.

    Operators:
        a + b, a - b    elementwise, shapes must match
        a * k, a / k    scalar multiply / divide
        a @ b           matrix product, a.width must equal b.height
        a[row]          view of one row (writable)
    """

    # Make numpy scalars defer to our operators (e.g. np.float64(2) * m)
    __array_ufunc__ = None

    def __init__(self, height, width, dtype=float):
        self._check_dims(height, width)
        self._values = np.zeros((height, width), dtype=dtype)

    @staticmethod
    def _check_dims(height, width):
        if height < 0 or width < 0:
            raise ValueError(f"Matrix dimensions must be non-negative, got {height}x{width}")

    @classmethod
    def _wrap(cls, array):
        # Build a matrix around an existing 2-D array without copying
        matrix = cls.__new__(cls)
        matrix._values = array
        return matrix

    @classmethod
    def new_map(cls, height, width, func, dtype=None):
        """Create a matrix whose element (row, col) is func(row, col).

        func is called exactly once per cell, row by row.
        """
        cls._check_dims(height, width)
        values = [func(row, col) for row in range(height) for col in range(width)]
        if not values:
            return cls(height, width, dtype=dtype or float)
        return cls._wrap(np.array(values, dtype=dtype).reshape(height, width))

    @classmethod
    def from_rows(cls, rows, dtype=None):
        """Create a matrix from a list of equally long rows"""
        array = np.array(rows, dtype=dtype)
        if array.ndim != 2:
            raise ValueError(f"Expected a list of rows, got an array with {array.ndim} dimension(s)")
        return cls._wrap(array)

    @property
    def height(self):
        return self._values.shape[0]

    @property
    def width(self):
        return self._values.shape[1]

    @property
    def shape(self):
        return self._values.shape

    @property
    def dtype(self):
        return self._values.dtype

    def map(self, func, vectorized=False):
        """Return a new matrix with func applied to every element.

        With vectorized=True, func receives the whole underlying array once
        (e.g. a numpy ufunc) instead of one scalar at a time.
        """
        if vectorized:
            return Matrix._wrap(np.asarray(func(self._values.copy())).reshape(self.shape))
        return Matrix.new_map(self.height, self.width, lambda row, col: func(self._values[row, col]))

    def copy(self):
        return Matrix._wrap(self._values.copy())

    def transpose(self):
        return Matrix._wrap(self._values.T.copy())

    def tolist(self):
        return self._values.tolist()

    def flatten(self):
        """Elements in row-major order"""
        return self._values.ravel().tolist()

    def to_numpy(self):
        return self._values.copy()

    def print(self):
        print(self)

    # --- Indexing ---------------------------------------------------------

    def _check_row(self, row):
        if not isinstance(row, (int, np.integer)):
            raise TypeError(f"Row index must be an integer, got {type(row).__name__}")
        if row < 0 or row >= self.height:
            raise IndexError(f"Indexing with row {row} is invalid for matrix with height of {self.height}")

    def __getitem__(self, key):
        if isinstance(key, tuple):
            row, col = key
            self._check_row(row)
            if col < 0 or col >= self.width:
                raise IndexError(f"Indexing with column {col} is invalid for matrix with width of {self.width}")
            return self._values[row, col]
        self._check_row(key)
        return self._values[key]

    def __setitem__(self, key, value):
        if isinstance(key, tuple):
            row, col = key
            self._check_row(row)
            if col < 0 or col >= self.width:
                raise IndexError(f"Indexing with column {col} is invalid for matrix with width of {self.width}")
            self._values[row, col] = value
        else:
            self._check_row(key)
            self._values[key] = value

    def __len__(self):
        return self.height

    def __iter__(self):
        return iter(self._values)

    # --- Arithmetic -------------------------------------------------------

    def _check_same_shape(self, other):
        if self.width != other.width:
            raise ValueError(f"lhs width is {self.width} and rhs width is {other.width}, which is an invalid combination")
        if self.height != other.height:
            raise ValueError(f"lhs height is {self.height} and rhs height is {other.height}, which is an invalid combination")

    def __add__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        return Matrix._wrap(self._values + other._values)

    def __sub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        return Matrix._wrap(self._values - other._values)

    def __iadd__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        self._values += other._values
        return self

    def __isub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        self._values -= other._values
        return self

    def __mul__(self, scalar):
        if isinstance(scalar, Matrix):
            raise TypeError("Use the @ operator for matrix multiplication")
        return Matrix._wrap(self._values * scalar)

    __rmul__ = __mul__

    def __imul__(self, scalar):
        if isinstance(scalar, Matrix):
            raise TypeError("Use the @ operator for matrix multiplication")
        self._values *= scalar
        return self

    def __truediv__(self, scalar):
        if isinstance(scalar, Matrix):
            return NotImplemented
        return Matrix._wrap(self._values / scalar)

    def __itruediv__(self, scalar):
        if isinstance(scalar, Matrix):
            return NotImplemented
        # int matrices become float on true division
        if not np.issubdtype(self._values.dtype, np.floating):
            self._values = self._values / scalar
        else:
            self._values /= scalar
        return self

    def __matmul__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.width != other.height:
            raise ValueError(f"lhs width is {self.width} and rhs height is {other.height}, which is an invalid combination")
        return Matrix._wrap(self._values @ other._values)

    def __neg__(self):
        return Matrix._wrap(-self._values)

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._values, other._values))

    __hash__ = None

    def __repr__(self):
        return f"Matrix(height={self.height}, width={self.width}, values={self.tolist()})"

    def __str__(self):
        rows = ["\t[" + " ".join(repr(value) for value in row) + "]" for row in self.tolist()]
        return "[\n" + "\n".join(rows) + "\n]"
