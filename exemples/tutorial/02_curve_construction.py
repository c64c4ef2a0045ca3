# %% Imports
from hsplyne import HermiteSpline2D, Spline2DComponent
import numpy as np
import matplotlib.pyplot as plt

# %% Create an open curve through 4 points
spline = HermiteSpline2D([[0, 0], [2, 2], [4, 0], [6, 2]])
print(f"Length of the curve: {spline.length:.3f}")

# %% Curvature goes from straight segments to overshooting tangents
fig, ax = plt.subplots()
for curvature in [0, 0.25, 0.5, 1]:
    spline.curvature = curvature
    pts = spline(spline.linspace(20))
    ax.plot(pts[:, 0], pts[:, 1], label=f"curvature {curvature}")
ax.scatter(*spline.get_points().T, c='k', zorder=2)
ax.legend()
ax.set_aspect(1)
plt.show()
spline.curvature = 0.5

# %% Evenly spaced parameters vs evenly spaced distances
XI = np.linspace(0, 1, 16)
by_parameter = spline(XI)
by_distance = spline.interpolate_distance(np.linspace(0, spline.length, 16))
plt.plot(*spline(spline.linspace(20)).T, c='#7570b3')
plt.scatter(*by_parameter.T, label="uniform t")
plt.scatter(*by_distance.T, marker='x', label="uniform distance")
plt.legend()
plt.gca().set_aspect(1)
plt.show()

# %% Close the curve and scroll an open one
spline.closed = True
print(f"Closed length: {spline.length:.3f}, {spline.nb_segments} segments")
spline.closed = False
for x in [8, 10, 12]:
    spline.add_point_scroll([x, (x//2 % 2)*2])
print(spline.get_points())

# %% Save and preview through the component
component = Spline2DComponent(spline.get_points(), curvature=0.5)
component.plotMPL(show_normals=True, normal_length=0.5, show_distance=True, distance_marker=1.)
plt.show()
component.save("scrolled_spline.json", verbose=True)

# %%
