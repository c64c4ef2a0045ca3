# %% imports
from hsplyne import HermiteBasis
import numpy as np
import matplotlib.pyplot as plt

# %% A Hermite basis over 3 control points (2 segments)
basis = HermiteBasis(3)
XI = basis.linspace(50)
N = basis.DN(XI)
print(f"The output of basis.DN is a sparse matrix with shape {N.shape}: \n(number of evaluation points, 2 x number of control points)")

# %% Plot the weights of the control points (first 3 columns) and of the tangents (last 3)
labels = [f"point {i}" for i in range(basis.n)] + [f"tangent {i}" for i in range(basis.n)]
plt.plot(XI, N.toarray(), label=labels)
plt.title("Hermite basis over 2 segments")
plt.xlabel("Global parameter t")
plt.legend()
plt.grid()
plt.show()

# %% Tangents are a linear operator on the control points
points = np.array([[0, 0], [2, 2], [4, 0]], dtype='float')
tangents = basis.tangent_operator(curvature=0.5) @ points
positions = N @ np.vstack((points, tangents))
plt.plot(positions[:, 0], positions[:, 1])
plt.scatter(points[:, 0], points[:, 1])
plt.gca().set_aspect(1)
plt.show()

# %%
